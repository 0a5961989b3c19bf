#!/usr/bin/env python3
"""
task-sync - Reconcile task snapshots between devices.
"""

import argparse
import logging
import sys

from task_sync.core.config import load_config, get_default_config_path
from task_sync.core.exceptions import TaskSyncError
from task_sync.commands import (
    MergeCommand,
    SuggestCommand,
    ValidateCommand
)


def main(argv=None):
    """Main entry point for task-sync."""
    parser = argparse.ArgumentParser(
        description="Merge task snapshots exported by two devices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  task-sync merge remote.json                       # Merge into the local snapshot
  task-sync merge data.sync-conflict-XYZ.json       # Conflict copy: deletions win
  task-sync merge remote.json --dry-run             # Show what would change
  task-sync suggest                                 # What to work on next
  task-sync validate backup.json                    # Check an export file
        """
    )

    default_config = get_default_config_path()

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {default_config})',
        default=None
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Merge command
    merge_parser = subparsers.add_parser('merge', help='Merge an incoming snapshot into local data')
    merge_parser.add_argument(
        'incoming',
        help='Snapshot file received from the other device'
    )
    merge_parser.add_argument(
        '--local',
        help='Local snapshot file (default: from config)'
    )
    merge_parser.add_argument(
        '--mode',
        choices=['sync', 'conflict'],
        help='Merge mode (default: conflict for conflict copies, otherwise the configured mode)'
    )
    merge_parser.add_argument(
        '--output',
        metavar='PATH',
        help='Write the merged snapshot here instead of replacing the local file'
    )
    merge_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be merged without writing anything'
    )

    # Suggest command
    suggest_parser = subparsers.add_parser('suggest', help='Suggest the next task to work on')
    suggest_parser.add_argument(
        'snapshot',
        nargs='?',
        help='Snapshot file (default: local snapshot from config)'
    )
    suggest_parser.add_argument(
        '--all',
        action='store_true',
        help='List every open task in suggestion order'
    )
    suggest_parser.add_argument(
        '--skip',
        action='append',
        default=[],
        metavar='TASK_ID',
        help='Skip a task id (repeatable)'
    )

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Check that a file is an importable snapshot')
    validate_parser.add_argument(
        'file',
        help='Snapshot file to check'
    )

    args = parser.parse_args(argv)

    # Configure logging if verbose mode is enabled
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # Show help if no command specified
    if not args.command:
        parser.print_help()
        return 1

    # Load configuration
    config = load_config(args.config)

    if args.verbose:
        actual_config_path = args.config if args.config else get_default_config_path()
        print(f"Using config: {actual_config_path}")

    # Execute command
    try:
        config.validate()

        if args.command == 'merge':
            cmd = MergeCommand(config, verbose=args.verbose)
            success = cmd.run(
                incoming_path=args.incoming,
                local_path=args.local,
                mode=args.mode,
                output_path=args.output,
                dry_run=args.dry_run,
            )

        elif args.command == 'suggest':
            cmd = SuggestCommand(config, verbose=args.verbose)
            success = cmd.run(
                snapshot_path=args.snapshot,
                show_all=args.all,
                skipped_ids=args.skip,
            )

        elif args.command == 'validate':
            cmd = ValidateCommand(verbose=args.verbose)
            success = cmd.run(args.file)

        else:
            print(f"Unknown command '{args.command}'.")
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except TaskSyncError as e:
        print(f"Error: {e}")
        if not args.verbose:
            print("Re-run with --verbose for more detail.")
        else:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
