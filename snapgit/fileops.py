#working-tree access for the commit walk
#blocking calls run in worker threads so a directory's children can be read concurrently
import asyncio
import os

from .data import GIT_DIR_NAME

#(name, path, is_dir) for regular files and directories only:
#.git, symlinks, fifos, sockets and device nodes are left out
def _scan (directory):
    listing = []
    with os.scandir (directory) as it:
        for entry in it:
            if entry.name == GIT_DIR_NAME:
                continue
            if entry.is_dir (follow_symlinks=False):
                listing.append ((entry.name, entry.path, True))
            elif entry.is_file (follow_symlinks=False):
                listing.append ((entry.name, entry.path, False))
    return listing

async def list_files (directory):
    return await asyncio.to_thread (_scan, os.fspath (directory))

def _read (path):
    with open (path, 'rb') as f:
        return f.read ()

async def read_bytes (path):
    return await asyncio.to_thread (_read, os.fspath (path))

def _create (path, content, mode):
    os.makedirs (os.path.dirname (path), exist_ok=True)
    with open (path, mode) as f:
        f.write (content)

#writes content to root/relative_path, creating parent directories
async def create_file_with_content (root, relative_path, content):
    path = os.path.join (os.fspath (root), *relative_path.split ('/'))
    mode = 'wb' if isinstance (content, bytes) else 'w'
    await asyncio.to_thread (_create, path, content, mode)
    return path
