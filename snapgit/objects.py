#encodings of tree and commit objects in git's on-disk format
import os
import binascii
import itertools #iterating
import operator

from collections import namedtuple

from .errors import BadObject

BLOB_MODE = b'100644'
TREE_MODE = b'40000'

#one line of a tree object; content_hash is the raw 20 byte digest
TreeEntry = namedtuple ('TreeEntry', ['name', 'content_hash', 'is_blob'])

Commit = namedtuple ('Commit', ['tree', 'parents', 'author', 'committer', 'message'])

def sha_to_bytes (sha):
    return binascii.unhexlify (sha)

def bytes_to_sha (raw):
    return binascii.hexlify (raw).decode ('ascii')

#names are filesystem bytes, so undecodable names (surrogate escapes) survive the trip
def _name_bytes (name):
    return os.fsencode (name)

#git orders directories as if their name ended with a slash
def tree_sort_key (entry):
    name = _name_bytes (entry.name)
    return name if entry.is_blob else name + b'/'

#tree payload in git collation order; names must be unique, without separator or NUL
def serialize_tree (entries):
    seen = set ()
    parts = []
    for entry in sorted (entries, key=tree_sort_key):
        if not entry.name or '/' in entry.name or '\x00' in entry.name:
            raise ValueError (f'invalid tree entry name {entry.name!r}')
        if entry.name in seen:
            raise ValueError (f'duplicate tree entry {entry.name!r}')
        seen.add (entry.name)
        mode = BLOB_MODE if entry.is_blob else TREE_MODE
        parts.append (mode + b' ' + _name_bytes (entry.name) + b'\x00' + entry.content_hash)
    return b''.join (parts)

def parse_tree (payload):
    entries = []
    pos = 0
    while pos < len (payload):
        space = payload.find (b' ', pos)
        nul = payload.find (b'\x00', space + 1)
        if space < 0 or nul < 0 or nul + 21 > len (payload):
            raise BadObject ('truncated tree entry')
        mode = payload[pos:space]
        name = os.fsdecode (payload[space + 1:nul])
        content_hash = payload[nul + 1:nul + 21]
        entries.append (TreeEntry (name, content_hash, mode != TREE_MODE))
        pos = nul + 21
    return entries

#splits a commit payload into its header fields and message
def parse_commit (payload):
    tree = None
    parents = []
    author = committer = None
    lines = iter (payload.decode ('utf-8').split ('\n'))
    for line in itertools.takewhile (operator.truth, lines): #headers end at the first empty line
        key, _, value = line.partition (' ')
        if key == 'tree':
            tree = value
        elif key == 'parent':
            parents.append (value)
        elif key == 'author':
            author = value
        elif key == 'committer':
            committer = value
        # other headers (gpgsig, encoding...) are not used here
    if tree is None:
        raise BadObject ('commit has no tree')

    message = '\n'.join (lines)
    if message.endswith ('\n'):
        message = message[:-1]
    return Commit (tree=tree, parents=parents, author=author,
                   committer=committer, message=message)
