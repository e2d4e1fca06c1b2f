#serves as disk: everything that touches the control directory lives here
import os
import hashlib # sha1 names every object
import zlib # loose objects are stored deflated, same as git
import tempfile
import configparser

from collections import namedtuple

from .errors import BadObject

GIT_DIR_NAME = '.git' #reserved directory, never part of a snapshot
LAST_CHANGE_FILE = 'snapgit-last-change'

DEFAULT_CONFIG = '''[core]
\trepositoryformatversion = 0
\tfilemode = false
\tbare = false
'''

def git_dir_for (root):
    return os.path.join (os.fspath (root), GIT_DIR_NAME)

def init (git_dir): #makes the control directory, the object database and the refs namespace
    os.makedirs (git_dir)
    os.makedirs (f'{git_dir}/objects')
    os.makedirs (f'{git_dir}/refs/heads')
    os.makedirs (f'{git_dir}/refs/tags')
    with open (f'{git_dir}/config', 'w') as f:
        f.write (DEFAULT_CONFIG)

RefValue = namedtuple('RefValue', ['symbolic', 'value'])

#Updates or creates a reference file with the given OID (or symbolic value).
def update_ref (git_dir, ref, value, deref=True):
    ref = _get_ref_internal (git_dir, ref, deref)[0] #returns (ref_path, RefValue), we only want the name
    assert value.value
    if value.symbolic:
        value = f'ref: {value.value}'
    else:
        value = value.value

    write_file (f'{git_dir}/{ref}', f'{value}\n')

def get_ref (git_dir, ref, deref=True): #returns the RefValue stored under the reference name
    return _get_ref_internal (git_dir, ref, deref)[1]

#Returns the final reference name and a RefValue namedtuple
def _get_ref_internal (git_dir, ref, deref):
    ref_path = f'{git_dir}/{ref}'
    value = None
    if os.path.isfile (ref_path):
        with open (ref_path) as f:
            value = f.read ().strip () #either an oid or a symbolic ref like ref: refs/heads/main
    symbolic = bool (value) and value.startswith ('ref:')
    if symbolic:
        value = value.split (':', 1)[1].strip ()
        if deref:
            return _get_ref_internal (git_dir, value, deref=True)
    return ref, RefValue (symbolic=symbolic, value=value)

#Iterates over all refs in the repository, yielding each one with its value.
def iter_refs (git_dir, prefix='', deref=True):
    refs = ['HEAD']
    for root, _, filenames in os.walk (f'{git_dir}/refs/'):
        root = os.path.relpath (root, git_dir).replace (os.sep, '/')
        refs.extend (f'{root}/{name}' for name in filenames)
    for refname in refs:
        if not refname.startswith (prefix):
            continue
        ref = get_ref (git_dir, refname, deref=deref)
        if ref.value:
            yield refname, ref

def object_path (git_dir, oid):
    return f'{git_dir}/objects/{oid[:2]}/{oid[2:]}'

def hash_object (git_dir, data, type_='blob'): #stores the object under the sha1 of header + content
    obj = f'{type_} {len (data)}'.encode () + b'\x00' + data
    oid = hashlib.sha1 (obj).hexdigest ()
    path = object_path (git_dir, oid)
    if os.path.isfile (path): #same content, same name: already stored
        return oid
    os.makedirs (os.path.dirname (path), exist_ok=True)
    # write aside and rename so a reader never sees half an object
    fd, tmp_path = tempfile.mkstemp (dir=os.path.dirname (path), prefix='tmp_obj_')
    try:
        with os.fdopen (fd, 'wb') as out:
            out.write (zlib.compress (obj))
        os.replace (tmp_path, path)
    except BaseException:
        if os.path.exists (tmp_path):
            os.remove (tmp_path)
        raise
    return oid

def read_object (git_dir, oid): #returns (type, content) of a stored object
    try:
        with open (object_path (git_dir, oid), 'rb') as f:
            obj = zlib.decompress (f.read ())
    except FileNotFoundError as exc:
        raise BadObject (f'object {oid} not found') from exc
    except zlib.error as exc:
        raise BadObject (f'object {oid} is corrupt') from exc

    header, sep, content = obj.partition (b'\x00')
    type_, _, size = header.decode ('ascii', 'replace').partition (' ')
    if not sep or not size.isdigit () or int (size) != len (content):
        raise BadObject (f'object {oid} has a malformed header')
    return type_, content

def get_object (git_dir, oid, expected='blob'): #gives the object contents by passing its oid
    type_, content = read_object (git_dir, oid)
    if expected is not None and type_ != expected:
        raise BadObject (f'object {oid}: expected {expected}, got {type_}')
    return content

def object_exists (git_dir, oid):
    return os.path.isfile (object_path (git_dir, oid))

def write_file (path, content, mode='w'): #creates parent directories, then writes the whole file
    os.makedirs (os.path.dirname (path), exist_ok=True)
    with open (path, mode) as f:
        f.write (content)

def set_last_change (git_dir, value):
    write_file (f'{git_dir}/{LAST_CHANGE_FILE}', f'{value}\n')

def get_config_value (git_dir, section, key):
    parser = configparser.ConfigParser (interpolation=None, strict=False)
    try:
        parser.read (f'{git_dir}/config')
    except configparser.Error:
        return None
    return parser.get (section, key, fallback=None)
