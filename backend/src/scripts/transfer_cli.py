#!/usr/bin/env python3
"""
Ride Tracker Transfer - Export/Import CLI
Moves ride history and notes in and out of the local store as text.

Usage:
    # Export history as a DISNEY_H: wire string
    python -m scripts.transfer_cli export history

    # Export notes as legacy pretty-printed JSON
    python -m scripts.transfer_cli export notes --json

    # Import a payload file, merging with what is stored
    python -m scripts.transfer_cli import backup.txt

    # Import from stdin, replacing stored data
    pbpaste | python -m scripts.transfer_cli import - --strategy replace

    # Show which format a payload is in
    python -m scripts.transfer_cli detect backup.txt
"""

import argparse
import sys
from typing import List, Optional

from transfer.format_detector import detect
from transfer.reconciler import ImportStrategy
from transfer.transfer_service import TransferService
from utils.config import TRANSFER_DEFAULT_STRATEGY


def read_input(source: str) -> str:
    """Read payload text from a file path, or stdin when source is '-'."""
    if source == '-':
        return sys.stdin.read()
    with open(source, 'r', encoding='utf-8') as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Export and import ride history and notes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    export_parser = subparsers.add_parser('export', help='Print stored data as a payload')
    export_parser.add_argument('kind', choices=['history', 'notes'], help='What to export')
    export_parser.add_argument(
        '--json',
        action='store_true',
        help='Write the legacy JSON format instead of the compressed wire string'
    )

    import_parser = subparsers.add_parser('import', help='Import a payload into the store')
    import_parser.add_argument('source', help="Payload file, or '-' for stdin")
    import_parser.add_argument(
        '--strategy',
        choices=[s.value for s in ImportStrategy],
        default=TRANSFER_DEFAULT_STRATEGY,
        help='merge keeps existing data, replace discards it (default: %(default)s)'
    )

    detect_parser = subparsers.add_parser('detect', help='Classify a payload without importing')
    detect_parser.add_argument('source', help="Payload file, or '-' for stdin")

    return parser


def run(args: argparse.Namespace, service: TransferService) -> int:
    """
    Execute a parsed command.

    Returns:
        Process exit code
    """
    if args.command == 'export':
        if args.kind == 'history':
            payload = service.export_history_json() if args.json else service.export_history()
        else:
            payload = service.export_notes_json() if args.json else service.export_notes()
        print(payload)
        return 0

    try:
        text = read_input(args.source)
    except OSError as e:
        print(f"Error: cannot read {args.source}: {e}", file=sys.stderr)
        return 1

    if args.command == 'detect':
        print(detect(text).value)
        return 0

    result = service.import_any(text, args.strategy)
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    print(result.message)
    return 0


def main(argv: Optional[List[str]] = None, service: Optional[TransferService] = None) -> int:
    args = build_parser().parse_args(argv)

    if service is None:
        from database.transfer_store import SqlTransferStore
        service = TransferService(SqlTransferStore())

    return run(args, service)


if __name__ == '__main__':
    sys.exit(main())
