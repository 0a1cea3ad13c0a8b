"""Command-line interface and argument parsing for appbundle."""

import argparse

VERSION = '0.4.0'

# Global args storage (set by parse_args)
_args = None


def parse_args(argv=None):
    """Parse command-line arguments. Handles --version and exits."""
    global _args
    parser = argparse.ArgumentParser(
        prog='appbundle',
        description='Resolve hicolor icons and archive Linux bundle trees',
    )
    parser.add_argument('--version', action='version', version=f'appbundle {VERSION}')
    parser.add_argument('--verbose', action='store_true', help='Log debug output and call timings')
    parser.add_argument('--config', metavar='FILE', help='Bundle settings file (dotenv format)')

    commands = parser.add_subparsers(dest='command', required=True)

    icons = commands.add_parser('icons', help='Write deduplicated hicolor icons under DATA_DIR')
    icons.add_argument('data_dir')
    icons.add_argument('--staged', action='store_true',
                       help='Only publish icons once every source resolved')

    desktop = commands.add_parser('desktop', help='Write the .desktop entry under DATA_DIR')
    desktop.add_argument('data_dir')

    archive = commands.add_parser('archive', help='Pack SRC_DIR into a sibling .tar.gz')
    archive.add_argument('src_dir')

    md5sum = commands.add_parser('md5sum', help='Print the MD5 digest of FILE')
    md5sum.add_argument('file')

    du = commands.add_parser('du', help='Print the total size of DIR in bytes')
    du.add_argument('dir')

    _args = parser.parse_args(argv)
    return _args


def get_args():
    """Get parsed arguments. Returns None if parse_args() hasn't been called."""
    return _args
