#!/usr/bin/env python3
"""
Command line interface for the todo database.

Usage:
    todo [--db FILE] -l
    todo [--db FILE] -q ID [-s true|false]
    todo [--db FILE] -a '{"id": 99, "title": "sample item", "done": true}'
    todo [--db FILE] -u '{"id": 99, "title": "sample item", "done": false}'
    todo [--db FILE] -d ID

Environment Variables:
    TODO_DB_FILE: Database file (default: ./data/todo.json)
"""

import argparse
import logging
import sys
from typing import List, Optional

from voting_services.shared.errors import VotingError

from .config import Config
from .db import ToDoStore

logger = logging.getLogger(__name__)


def parse_bool(value: str) -> bool:
    """Parse a done status given on the command line."""
    lowered = value.strip().lower()
    if lowered in ('true', 't', '1', 'yes'):
        return True
    if lowered in ('false', 'f', '0', 'no'):
        return False
    raise argparse.ArgumentTypeError(f"invalid done status: {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='todo',
        description='Manage a todo list stored in a JSON file'
    )
    parser.add_argument(
        '--db',
        default=Config.TODO_DB_FILE,
        help=f'Database file (default: {Config.TODO_DB_FILE})'
    )
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument(
        '-l', '--list',
        action='store_true',
        help='List all items'
    )
    actions.add_argument(
        '-q', '--query',
        type=int,
        metavar='ID',
        help='Show one item (combine with -s to change its status)'
    )
    actions.add_argument(
        '-a', '--add',
        metavar='JSON',
        help='Add an item given as JSON'
    )
    actions.add_argument(
        '-u', '--update',
        metavar='JSON',
        help='Update an item given as JSON'
    )
    actions.add_argument(
        '-d', '--delete',
        type=int,
        metavar='ID',
        help='Delete an item'
    )
    parser.add_argument(
        '-s', '--status',
        type=parse_bool,
        metavar='BOOL',
        help='New done status for the item selected with -q'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.status is not None and args.query is None:
        parser.error('-s requires -q ID')

    try:
        store = ToDoStore(args.db)

        if args.list:
            store.print_all_items(store.get_all_items())
        elif args.query is not None and args.status is not None:
            store.change_item_done_status(args.query, args.status)
            print(f"Item {args.query} done status set to {str(args.status).lower()}")
        elif args.query is not None:
            store.print_item(store.get_item(args.query))
        elif args.add is not None:
            item = store.json_to_item(args.add)
            store.add_item(item)
            print(f"Item {item.id} added")
        elif args.update is not None:
            item = store.json_to_item(args.update)
            store.update_item(item)
            print(f"Item {item.id} updated")
        elif args.delete is not None:
            store.delete_item(args.delete)
            print(f"Item {args.delete} deleted")

    except VotingError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
