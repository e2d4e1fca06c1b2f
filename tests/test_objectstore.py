"""Unit tests for the async ObjectStore."""

import asyncio
import os

import pytest

from snapgit import data
from snapgit.errors import BadObject, NotARepository, UnbornBranch
from snapgit.objects import TreeEntry, sha_to_bytes
from snapgit.objectstore import ObjectStore

HELLO_BLOB = 'ce013625030ba8dba906f756967f9e9ca394464a'


@pytest.mark.asyncio
async def test_write_raw_object_accepts_text_and_bytes(store):
    assert await store.write_raw_object('blob', 'hello\n') == HELLO_BLOB
    assert await store.write_raw_object('blob', b'hello\n') == HELLO_BLOB
    assert os.path.isfile(data.object_path(store.git_dir, HELLO_BLOB))


@pytest.mark.asyncio
async def test_retrieve_by_kind(store):
    blob = await store.write_raw_object('blob', b'hello\n')
    tree = await store.write_tree([TreeEntry('hello.txt', sha_to_bytes(blob), True)])
    commit = await store.write_raw_object('commit', f'tree {tree}\n\nmsg\n')

    assert await store.retrieve_object(blob, 'blob') == b'hello\n'
    assert await store.retrieve_object(tree, 'tree') == [
        TreeEntry('hello.txt', sha_to_bytes(blob), True)]
    parsed = await store.retrieve_object(commit, 'commit')
    assert parsed.tree == tree
    assert parsed.message == 'msg'


@pytest.mark.asyncio
async def test_retrieve_wrong_kind_fails(store):
    blob = await store.write_raw_object('blob', b'hello\n')
    with pytest.raises(BadObject):
        await store.retrieve_object(blob, 'commit')


@pytest.mark.asyncio
async def test_retrieve_non_utf8_commit_fails(store):
    sha = await store.write_raw_object('commit', b'tree \xff\n\n')
    with pytest.raises(BadObject, match='utf-8'):
        await store.retrieve_object(sha, 'commit')


@pytest.mark.asyncio
async def test_head_ref_of_fresh_repository(store):
    assert await store.get_head_ref() == 'refs/heads/main'
    with pytest.raises(UnbornBranch):
        await store.get_head_for_ref('refs/heads/main')


@pytest.mark.asyncio
async def test_detached_head_is_its_own_ref(store, git_dir):
    data.update_ref(git_dir, 'HEAD', data.RefValue(symbolic=False, value=HELLO_BLOB), deref=False)
    assert await store.get_head_ref() == 'HEAD'
    assert await store.get_head_for_ref('HEAD') == HELLO_BLOB


@pytest.mark.asyncio
async def test_missing_head_is_not_a_repository(tmp_path):
    store = ObjectStore(tmp_path / '.git')
    with pytest.raises(NotARepository):
        await store.get_head_ref()


@pytest.mark.asyncio
async def test_update_ref_writes_sha_and_newline(store, git_dir):
    await store.update_ref('refs/heads/topic/x', HELLO_BLOB)
    with open(os.path.join(git_dir, 'refs', 'heads', 'topic', 'x')) as f:
        assert f.read() == HELLO_BLOB + '\n'
    assert await store.get_head_for_ref('refs/heads/topic/x') == HELLO_BLOB


@pytest.mark.asyncio
async def test_last_change_marker(store, git_dir):
    marker = os.path.join(git_dir, data.LAST_CHANGE_FILE)
    assert not os.path.exists(marker)
    await store.update_last_change('42')
    with open(marker) as f:
        assert f.read() == '42\n'
    await store.update_last_change()
    with open(marker) as f:
        assert int(f.read()) > 42


@pytest.mark.asyncio
async def test_concurrent_writes_of_same_content(git_dir):
    store = ObjectStore(git_dir, max_concurrency=2)
    shas = await asyncio.gather(*(store.write_raw_object('blob', b'dup') for _ in range(10)))
    assert len(set(shas)) == 1
    assert await store.retrieve_object(shas[0], 'blob') == b'dup'


def test_for_root(repo):
    store = ObjectStore.for_root(repo)
    assert store.git_dir == os.path.join(str(repo), '.git')
