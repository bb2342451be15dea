"""CLI Argument Parsing"""

import argparse
import argcomplete

from pushit import __version__
from pushit.config import VALID_PROVIDERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pushit',
        description='Stage, describe and commit your changes with an AI-written message',
        epilog='Example: pushit --dry-run (preview the message without touching the repo)'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Repository options
    parser.add_argument('--dry-run', action='store_true', help='Generate a message without staging, committing or pushing')
    parser.add_argument('--no-push', action='store_true', help='Never offer to push after committing')
    parser.add_argument('--no-files', action='store_true', help='Leave changed file contents out of the prompt')

    # LLM options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='LLM provider')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')

    # Output options
    parser.add_argument('--verbose', action='store_true', help='Show debug info (prompt size, timings, git calls)')

    # Setup/config
    parser.add_argument('--setup', action='store_true', help='Configure defaults')
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
