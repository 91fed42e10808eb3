#!/usr/bin/env python3
"""
dockmux
Application entry point
"""

import sys
import argparse


def main():
    """Main function"""
    parser = argparse.ArgumentParser(
        description='dockmux - Docker Engine API client',
        add_help=False
    )

    parser.add_argument(
        '--gui',
        metavar='CONTAINER',
        help='Open the log viewer window for a container'
    )

    # Parse only known arguments, the rest goes to the CLI
    args, remaining = parser.parse_known_args()

    if args.gui:
        from dockmux.gui import run_logs_viewer
        return run_logs_viewer(args.gui)

    from dockmux.cli import run_cli
    return run_cli(remaining)


if __name__ == "__main__":
    sys.exit(main())
