#async front of the loose-object database and the refs kept next to it
import asyncio
import logging
import os
import time

from . import data
from . import fileops
from .errors import BadObject, NotARepository, UnbornBranch
from .objects import parse_commit, parse_tree, serialize_tree

logger = logging.getLogger (__name__)

#content-addressed storage for blob, tree and commit objects
#disk work runs in worker threads, at most max_concurrency at a time;
#an object is readable as soon as the write that created it returns
class ObjectStore:

    def __init__ (self, git_dir, max_concurrency=16):
        self.git_dir = os.fspath (git_dir)
        self._limit = asyncio.Semaphore (max_concurrency)

    @classmethod
    def for_root (cls, root, **kwargs):
        return cls (data.git_dir_for (root), **kwargs)

    async def _run (self, func, *args):
        async with self._limit:
            return await asyncio.to_thread (func, *args)

    async def write_raw_object (self, kind, payload):
        if isinstance (payload, str):
            payload = payload.encode ('utf-8')
        sha = await self._run (data.hash_object, self.git_dir, payload, kind)
        logger.debug ("wrote %s %s (%d bytes)", kind, sha, len (payload))
        return sha

    async def write_tree (self, entries):
        return await self.write_raw_object ('tree', serialize_tree (entries))

    #bytes for a blob, a list of TreeEntry for a tree, a Commit for a commit
    async def retrieve_object (self, sha, expected_kind):
        payload = await self._run (data.get_object, self.git_dir, sha, expected_kind)
        try:
            if expected_kind == 'tree':
                return parse_tree (payload)
            if expected_kind == 'commit':
                return parse_commit (payload)
        except UnicodeDecodeError as exc:
            raise BadObject (f'object {sha} is not valid utf-8') from exc
        return payload

    #name of the ref HEAD points at, or HEAD itself when detached
    async def get_head_ref (self):
        head = await self._run (data.get_ref, self.git_dir, 'HEAD', False)
        if not head.value:
            raise NotARepository (f'no HEAD in {self.git_dir}')
        return head.value if head.symbolic else 'HEAD'

    async def get_head_for_ref (self, ref_name):
        ref = await self._run (data.get_ref, self.git_dir, ref_name)
        if not ref.value or ref.symbolic:
            raise UnbornBranch (f'{ref_name} does not point at a commit yet')
        return ref.value

    async def update_ref (self, ref_name, sha):
        async with self._limit:
            await fileops.create_file_with_content (self.git_dir, ref_name, f'{sha}\n')
        logger.debug ("%s -> %s", ref_name, sha)

    async def update_last_change (self, value=None):
        if value is None:
            value = int (time.time () * 1000)
        await self._run (data.set_last_change, self.git_dir, value)

    def __repr__ (self):
        return f'{type (self).__name__}({self.git_dir!r})'
