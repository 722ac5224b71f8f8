#!/usr/bin/env python3
"""
ignorewalk command line interface

Commands:
- walk: print every entry a breadth-first walk yields
- ls: list the direct children of a directory
- tree: print a nested tree of a directory
- find: find paths by regex or glob
- check: explain whether paths are ignored and by which rule
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from . import __version__
from .constants import DEFAULT_IGNORE_FILES, DEFAULT_RESULT_LIMIT, IGNORE_FILES_ENV
from .exceptions import IgnoreWalkError
from .listing import find_paths, list_directory, tree_directory
from .walker import DirectoryWalker, WalkOptions
from .utils import configure_logging, get_logger

logger = get_logger(__name__)


def default_ignore_files() -> List[str]:
    """Ignore filenames from IGNOREWALK_IGNORE_FILES, else the built-in default"""
    raw = os.environ.get(IGNORE_FILES_ENV, '')
    names = [name.strip() for name in raw.split(',') if name.strip()]
    return names or list(DEFAULT_IGNORE_FILES)


class IgnoreWalkCLI:
    """Routes parsed arguments to command handlers"""

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the argument parser"""
        parser = argparse.ArgumentParser(
            prog='ignorewalk',
            description='ignorewalk - ignore-aware directory traversal',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self.get_usage_examples()
        )
        parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
        parser.add_argument('--log-level', default=None,
            help='Log level (TRACE, DEBUG, INFO, WARNING, ERROR)')
        parser.add_argument('--log-file', default=None,
            help='Also write logs to this rotating file')

        subparsers = parser.add_subparsers(dest='command', help='Commands')

        # Walk command
        walk_parser = subparsers.add_parser('walk',
            help='Walk a directory breadth-first, skipping ignored entries')
        walk_parser.add_argument('path', nargs='?', default='.',
            help='Directory to walk (default: current directory)')
        walk_parser.add_argument('--ignore-file', action='append', dest='ignore_files',
            help='Ignore filename to honour (repeatable, default: .gitignore)')
        walk_parser.add_argument('--follow-symlinks', action='store_true',
            help='Follow symbolic links (not on Windows)')
        walk_parser.add_argument('--max-depth', type=int, default=None,
            help='Maximum depth to traverse')
        walk_parser.add_argument('--max-entries', type=int, default=None,
            help='Stop after this many entries')
        walk_parser.add_argument('--include-empty-dirs', action='store_true',
            help='Include empty directories')
        walk_parser.add_argument('--json', action='store_true',
            help='Output results as JSON lines')

        # List command
        ls_parser = subparsers.add_parser('ls',
            help='List the direct children of a directory')
        ls_parser.add_argument('path', nargs='?', default='.',
            help='Directory to list (default: current directory)')
        ls_parser.add_argument('--limit', type=int, default=DEFAULT_RESULT_LIMIT,
            help=f'Maximum entries (default: {DEFAULT_RESULT_LIMIT})')
        ls_parser.add_argument('--json', action='store_true',
            help='Output results as JSON')

        # Tree command
        tree_parser = subparsers.add_parser('tree',
            help='Print a nested tree of a directory')
        tree_parser.add_argument('path', nargs='?', default='.',
            help='Tree root (default: current directory)')
        tree_parser.add_argument('--depth', type=int, default=None,
            help='Maximum depth to traverse')
        tree_parser.add_argument('--regexp', default=None,
            help='Only keep relative paths matching this regex (case-insensitive)')
        tree_parser.add_argument('--limit', type=int, default=DEFAULT_RESULT_LIMIT,
            help=f'Maximum entries (default: {DEFAULT_RESULT_LIMIT})')

        # Find command
        find_parser = subparsers.add_parser('find',
            help='Find paths by regex or glob')
        find_parser.add_argument('pattern', nargs='?', default=None,
            help='Regex searched in relative paths')
        find_parser.add_argument('--path', default='.',
            help='Directory to search (default: current directory)')
        find_parser.add_argument('--glob', action='append', dest='globs',
            help='gitignore-style glob a path must match (repeatable)')
        find_parser.add_argument('--limit', type=int, default=None,
            help='Maximum results')
        find_parser.add_argument('--json', action='store_true',
            help='Output results as JSON')

        # Check command
        check_parser = subparsers.add_parser('check',
            help='Explain whether paths are ignored')
        check_parser.add_argument('paths', nargs='+',
            help='Paths to check')
        check_parser.add_argument('--root', default='.',
            help='Walk root whose ignore files apply (default: current directory)')
        check_parser.add_argument('--ignore-file', action='append', dest='ignore_files',
            help='Ignore filename to honour (repeatable, default: .gitignore)')

        return parser

    def get_usage_examples(self) -> str:
        """Get usage examples for help text"""
        return f"""
Examples:
  ignorewalk walk .                        # Every file not ignored
  ignorewalk walk . --max-depth 1          # Top level only
  ignorewalk walk . --ignore-file .ignore  # Honour a different ignore file
  ignorewalk tree src --depth 2            # Nested tree
  ignorewalk find '\\.py$'                  # Find Python files
  ignorewalk check build/out.js            # Which rule ignores this?

Environment Variables:
  {IGNORE_FILES_ENV}   Comma separated ignore filenames (default: .gitignore)
  IGNOREWALK_LOG_LEVEL     Log level (default: WARNING)
"""

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Main entry point"""
        parser = self.build_parser()
        args = parser.parse_args(argv)
        configure_logging(log_level=args.log_level, log_file=args.log_file)

        if not args.command:
            parser.print_help()
            return 0

        handler = getattr(self, f'cmd_{args.command}')
        try:
            return handler(args)
        except (IgnoreWalkError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def cmd_walk(self, args: argparse.Namespace) -> int:
        """Handle walk command"""
        options = WalkOptions(
            ignore_file_names=args.ignore_files or default_ignore_files(),
            follow_symlinks=args.follow_symlinks,
            max_depth=args.max_depth,
            max_entries=args.max_entries,
            include_empty_directories=args.include_empty_dirs,
        )
        walker = DirectoryWalker(args.path, options)
        for entry in walker.walk():
            if args.json:
                print(json.dumps({'path': entry.rel_path, 'type': entry.entry_type.value}))
            else:
                print(entry.rel_path)

        if walker.truncated:
            print(f"Results limited to {args.max_entries} entries", file=sys.stderr)
        return 0

    def cmd_ls(self, args: argparse.Namespace) -> int:
        """Handle ls command"""
        result = list_directory(Path(args.path).resolve(), limit=args.limit)
        if args.json:
            print(json.dumps({
                'content': result.entries,
                'total': result.total,
                'is_limited': result.is_limited,
            }, indent=2))
            return 0

        for item in result.entries:
            permissions = item.get('permissions', '')
            print(f"{permissions:>6} {item['type']:<16} {item['size']:>10} {item['name']}")
        if result.is_limited:
            print(f"Results limited to {args.limit} entries", file=sys.stderr)
        return 0

    def cmd_tree(self, args: argparse.Namespace) -> int:
        """Handle tree command"""
        result = tree_directory(Path(args.path).resolve(), depth=args.depth,
                                regexp=args.regexp, limit=args.limit)
        self._print_tree(result.content, '')
        if result.is_limited:
            print(f"Number of items exceeded {args.limit}. Try a narrower path or regexp.",
                  file=sys.stderr)
        return 0

    def cmd_find(self, args: argparse.Namespace) -> int:
        """Handle find command"""
        result = find_paths(Path(args.path).resolve(), pattern=args.pattern,
                            include_globs=args.globs, max_results=args.limit)
        if args.json:
            print(json.dumps({'matches': result.entries, 'total_matches': result.total}, indent=2))
        else:
            for match in result.entries:
                suffix = '/' if match['is_directory'] else ''
                print(f"{match['path']}{suffix}")
        return 0 if result.entries else 2

    def cmd_check(self, args: argparse.Namespace) -> int:
        """Handle check command"""
        root = Path(args.root).resolve()
        ignore_files = args.ignore_files or default_ignore_files()
        walker = DirectoryWalker(root, WalkOptions(ignore_file_names=ignore_files))
        manager = walker.ignore_manager
        # Ignore files are registered as a side effect of the walk
        visited = sum(1 for _ in walker.walk())
        logger.debug(f"Loaded {manager.get_stats()['ignore_files']} ignore files "
                     f"walking {visited} entries under {root}")

        any_ignored = False
        for raw in args.paths:
            path = Path(raw).resolve()
            result = manager.match(path, is_directory=path.is_dir())
            if result.rule is not None:
                origin = result.rule.source or result.rule.scope_dir
                print(f"{origin}:{result.rule.line}:{result.rule.pattern}\t{raw}"
                      f"\t{'ignored' if result.should_ignore else 'included'}")
            else:
                print(f"::\t{raw}\tincluded")
            any_ignored = any_ignored or result.should_ignore
        return 0 if any_ignored else 1

    def _print_tree(self, node: dict, indent: str):
        for name in sorted(node):
            print(f"{indent}{name}")
            self._print_tree(node[name], indent + '  ')


def main():
    """Main entry point"""
    cli = IgnoreWalkCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
