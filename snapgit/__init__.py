"""snapgit: commit a working tree into a git-compatible object store."""

__version__ = '1.0'
