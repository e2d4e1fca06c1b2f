#the commit command: snapshot the working tree and advance the current branch
import asyncio
import logging
from datetime import datetime

from . import fileops
from .errors import (
    BadObject,
    IOFailure,
    LastChangeMarkerFailure,
    NoChangesToCommit,
    ObjectStoreCorrupted,
    RefUpdateFailure,
    UnbornBranch,
)
from .objects import TreeEntry, sha_to_bytes

logger = logging.getLogger (__name__)

#writes every file under directory to the store and returns the tree sha
#None when nothing below directory is a file: no tree is written and the parent leaves it out
async def walk_files (directory, store):
    listing = await fileops.list_files (directory)
    # siblings are independent; the tree waits for all of them
    tasks = [asyncio.ensure_future (_walk_entry (name, path, is_dir, store))
             for name, path, is_dir in listing]
    try:
        results = await asyncio.gather (*tasks)
    except BaseException:
        # first failure wins: stop the siblings and collect their outcome before re-raising
        for task in tasks:
            task.cancel ()
        await asyncio.gather (*tasks, return_exceptions=True)
        raise
    entries = [entry for entry in results if entry is not None]
    if not entries:
        return None
    return await store.write_tree (entries)

async def _walk_entry (name, path, is_dir, store):
    if is_dir:
        sha = await walk_files (path, store)
        if sha is None:
            return None
        return TreeEntry (name, sha_to_bytes (sha), False)

    content = await fileops.read_bytes (path)
    sha = await store.write_raw_object ('blob', content)
    return TreeEntry (name, sha_to_bytes (sha), True)

#tree sha of the whole working tree; the empty tree when it holds no files
async def snapshot (root, store):
    sha = await walk_files (root, store)
    if sha is None:
        sha = await store.write_tree ([])
    return sha

#raises NoChangesToCommit when sha is the tree parent already has
async def check_tree_changed (store, parent, sha):
    if not parent: #first commit on the branch
        return
    try:
        parent_commit = await store.retrieve_object (parent, 'commit')
    except (BadObject, OSError) as exc:
        raise ObjectStoreCorrupted (f'cannot read parent commit {parent}') from exc
    if parent_commit.tree == sha:
        raise NoChangesToCommit ('nothing to commit, working tree clean')

#"<epoch seconds> <+|-><HHMM>" as found on author and committer lines
def format_timestamp (now=None):
    if now is None:
        now = datetime.now ().astimezone ()
    offset = now.utcoffset ()
    minutes = int (offset.total_seconds () // 60) if offset is not None else 0
    sign = '-' if minutes < 0 else '+'
    hours, minutes = divmod (abs (minutes), 60)
    return f'{int (now.timestamp ())} {sign}{hours:02d}{minutes:02d}'

def build_commit_text (tree, parent, name, email, timestamp, message):
    commit = f'tree {tree}\n' #key value pairs, then the message
    if parent:
        commit += f'parent {parent.rstrip ()}\n'
    commit += f'author {name} <{email}> {timestamp}\n'
    commit += f'committer {name} <{email}> {timestamp}\n'
    commit += '\n'
    commit += f'{message}\n'
    return commit

#commits the whole working tree at options.root and returns the commit sha
#nothing is written to the ref unless the commit object was stored first
async def commit (options):
    store = options.store

    ref_name = await store.get_head_ref ()
    try:
        parent = await store.get_head_for_ref (ref_name)
    except UnbornBranch:
        logger.debug ("%s is unborn, making a root commit", ref_name)
        parent = None

    try:
        sha = await snapshot (options.root, store)
    except (OSError, BadObject) as exc:
        raise IOFailure (f'cannot snapshot {options.root}: {exc}') from exc

    try:
        await check_tree_changed (store, parent, sha)
    except NoChangesToCommit:
        logger.info ("tree %s unchanged since %s, not committing", sha, parent)
        raise

    text = build_commit_text (sha, parent, options.name, options.email,
                              format_timestamp (), options.commit_message)
    try:
        commit_sha = await store.write_raw_object ('commit', text)
    except (OSError, BadObject) as exc:
        raise IOFailure (f'cannot write commit object: {exc}') from exc

    try:
        await store.update_ref (ref_name, commit_sha)
    except OSError as exc:
        raise RefUpdateFailure (f'commit {commit_sha} written but {ref_name} not updated: {exc}',
                                commit_sha=commit_sha) from exc
    logger.info ("[%s %s] %s", ref_name, commit_sha[:7], options.commit_message.split ('\n', 1)[0])

    try:
        await store.update_last_change ()
    except OSError as exc:
        raise LastChangeMarkerFailure (f'commit {commit_sha} done, last-change marker not written: {exc}',
                                       commit_sha=commit_sha) from exc
    return commit_sha
