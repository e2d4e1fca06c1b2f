import argparse
import asyncio
import logging
import os
import sys
import textwrap #for indenting log messages

from . import base
from . import commit as commit_cmd
from . import data
from .errors import GitError, NoChangesToCommit
from .objectstore import ObjectStore
from .options import GitOptions

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    try:
        return args.func(args) or 0
    except NoChangesToCommit as e:
        print(e)
        return 1
    except (GitError, ValueError, OSError) as e:
        print(f'fatal: {e}', file=sys.stderr)
        return 128

def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='snapgit')
    parser.add_argument('-v', '--verbose', action='store_true', help='log object writes and ref updates')
    commands = parser.add_subparsers(dest='command')
    commands.required = True

    init_parser = commands.add_parser('init')
    init_parser.set_defaults(func=init)
    init_parser.add_argument('directory', nargs='?', default='.')

    hash_object_parser = commands.add_parser('hash-object')
    hash_object_parser.set_defaults(func=hash_object)
    hash_object_parser.add_argument('file')
    hash_object_parser.add_argument(
        '-t', '--type',
        default='blob',
        choices=('blob', 'commit'),
        help='Object type (default: blob)',
    )

    cat_file_parser = commands.add_parser('cat-file')
    cat_file_parser.set_defaults(func=cat_file)
    cat_file_parser.add_argument('object')

    write_tree_parser = commands.add_parser('write-tree')
    write_tree_parser.set_defaults(func=write_tree)

    commit_parser = commands.add_parser('commit')
    commit_parser.set_defaults(func=commit)
    commit_parser.add_argument('-m', '--message', required=True)
    commit_parser.add_argument('--author-name', help='defaults to $GIT_AUTHOR_NAME, then user.name')
    commit_parser.add_argument('--author-email', help='defaults to $GIT_AUTHOR_EMAIL, then user.email')

    log_parser = commands.add_parser('log')
    log_parser.set_defaults(func=log)
    log_parser.add_argument('oid', default='@', nargs='?')

    status_parser = commands.add_parser('status')
    status_parser.set_defaults(func=status)

    return parser.parse_args(argv)

def _repo():
    root = base.find_root(os.getcwd())
    return root, data.git_dir_for(root)

def init(args):
    git_dir = base.init(args.directory)
    print(f'Initialized empty snapgit repository in {os.path.abspath(git_dir)}')

def hash_object(args):
    _, git_dir = _repo()
    with open(args.file, 'rb') as f:
        print(data.hash_object(git_dir, f.read(), type_=args.type))

def cat_file(args):
    _, git_dir = _repo()
    oid = base.get_oid(git_dir, args.object)
    type_, content = data.read_object(git_dir, oid)
    if type_ == 'tree':
        for mode, kind, entry_oid, name in base.iter_tree_entries(git_dir, oid):
            print(f'{mode} {kind} {entry_oid}\t{name}')
        return
    sys.stdout.flush()
    sys.stdout.buffer.write(content)
    sys.stdout.flush()

def write_tree(args):
    root, _ = _repo()
    store = ObjectStore.for_root(root)
    print(asyncio.run(commit_cmd.snapshot(root, store)))

def _identity(args, git_dir):
    name = args.author_name or os.environ.get('GIT_AUTHOR_NAME') or data.get_config_value(git_dir, 'user', 'name')
    email = args.author_email or os.environ.get('GIT_AUTHOR_EMAIL') or data.get_config_value(git_dir, 'user', 'email')
    if not name or not email:
        raise ValueError('author identity unknown; pass --author-name/--author-email or set GIT_AUTHOR_NAME/GIT_AUTHOR_EMAIL')
    return name, email

def commit(args):
    root, git_dir = _repo()
    name, email = _identity(args, git_dir)
    options = GitOptions(root=root, store=ObjectStore.for_root(root), name=name,
                         email=email, commit_message=args.message)
    print(asyncio.run(commit_cmd.commit(options)))

def log(args):
    _, git_dir = _repo()
    try:
        start = base.get_oid(git_dir, args.oid)
    except ValueError:
        if args.oid != '@':
            raise
        print(f'your current branch {base.get_branch_name(git_dir)!r} does not have any commits yet')
        return 1
    refs = {} #commit oid -> ref names pointing at it
    for refname, ref in data.iter_refs(git_dir):
        refs.setdefault(ref.value, []).append(refname)
    for oid in base.iter_commits_and_parents(git_dir, {start}):
        commit = base.get_commit(git_dir, oid)
        refs_str = f' ({", ".join(refs[oid])})' if oid in refs else ''
        print(f'commit {oid}{refs_str}')
        if commit.author:
            print(f'Author: {commit.author}')
        print('')
        print(textwrap.indent(commit.message, '    '))
        print('')

def status(args):
    _, git_dir = _repo()
    branch = base.get_branch_name(git_dir)
    if branch:
        print(f'On branch {branch}')
    else:
        HEAD = base.get_oid(git_dir, '@')
        print(f'HEAD detached at {HEAD[:10]}')
