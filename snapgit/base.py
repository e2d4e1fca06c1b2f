import os
import string #for hexdigits

from collections import deque

from . import data
from .errors import BadObject, NotARepository
from .objects import bytes_to_sha, parse_commit, parse_tree

DEFAULT_BRANCH = 'refs/heads/main'

def init (root='.'):
    git_dir = data.git_dir_for (root)
    data.init (git_dir)
    data.update_ref (git_dir, 'HEAD', data.RefValue (symbolic=True, value=DEFAULT_BRANCH))
    return git_dir

#climbs from start until a directory holding .git is found
def find_root (start='.'):
    path = os.path.abspath (start)
    while True:
        if os.path.isfile (f'{data.git_dir_for (path)}/HEAD'):
            return path
        parent = os.path.dirname (path)
        if parent == path:
            raise NotARepository (f'not a snapgit repository (or any parent): {os.path.abspath (start)}')
        path = parent

#commit object OID is passed, Commit namedtuple (tree, parents, author, committer, message) is returned
def get_commit (git_dir, oid):
    payload = data.get_object (git_dir, oid, 'commit')
    try:
        return parse_commit (payload)
    except UnicodeDecodeError as exc:
        raise BadObject (f'commit {oid} is not valid utf-8') from exc

#yields (mode, type, oid, name) for each line of a tree object
def iter_tree_entries (git_dir, oid):
    if not oid:
        return
    for entry in parse_tree (data.get_object (git_dir, oid, 'tree')):
        if entry.is_blob:
            yield '100644', 'blob', bytes_to_sha (entry.content_hash), entry.name
        else:
            yield '040000', 'tree', bytes_to_sha (entry.content_hash), entry.name

#walks through a commit history, first parent first
def iter_commits_and_parents (git_dir, oids):
    oids = deque (oids)
    visited = set ()
    while oids:
        oid = oids.popleft ()
        if not oid or oid in visited:
            continue
        visited.add (oid)
        yield oid
        commit = get_commit (git_dir, oid)
        oids.extendleft (commit.parents[:1])
        oids.extend (commit.parents[1:])

def get_branch_name (git_dir):
    HEAD = data.get_ref (git_dir, 'HEAD', deref=False)
    if not HEAD.symbolic:
        return None
    HEAD = HEAD.value
    assert HEAD.startswith ('refs/heads/')
    return os.path.relpath (HEAD, 'refs/heads').replace (os.sep, '/')

#on passing a ref name or sha it gives the commit OID
def get_oid (git_dir, name):
    if name == '@':
        name = 'HEAD'

    refs_to_try = [
        f'{name}',               # HEAD, refs/heads/main
        f'refs/{name}',
        f'refs/tags/{name}',
        f'refs/heads/{name}',
    ]
    for ref in refs_to_try:
        ref_val = data.get_ref (git_dir, ref)
        if ref_val.value and not ref_val.symbolic:
            return ref_val.value

    # Name is a raw SHA1
    is_hex = all (c in string.hexdigits for c in name)
    if len (name) == 40 and is_hex:
        return name.lower ()

    raise ValueError (f'{name} is not a valid reference or object ID')
