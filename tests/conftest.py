import pytest

from snapgit import base
from snapgit.objectstore import ObjectStore
from snapgit.options import GitOptions


def _write(root, relative_path, content):
    path = root.joinpath(*relative_path.split('/'))
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode()
    path.write_bytes(content)
    return path


@pytest.fixture
def write():
    """Create a working tree file, with parent directories."""
    return _write


@pytest.fixture
def repo(tmp_path):
    """An initialized, empty repository; returns its working tree root."""
    base.init(tmp_path)
    return tmp_path


@pytest.fixture
def git_dir(repo):
    return str(repo / '.git')


@pytest.fixture
def store(git_dir):
    return ObjectStore(git_dir)


@pytest.fixture
def make_options(repo, store):
    def _make(message='hello', name='Alice', email='alice@example.com'):
        return GitOptions(root=repo, store=store, name=name, email=email,
                          commit_message=message)
    return _make
