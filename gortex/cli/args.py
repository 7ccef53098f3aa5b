"""CLI Argument Parsing"""

import argparse
import argcomplete

from gortex import __version__
from gortex.config import VALID_PROVIDERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gortex',
        description='Write conventional commit messages for staged changes, with optional AI help',
        epilog='Example: gortex (suggest, confirm, commit)'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # LLM options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='LLM provider')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    parser.add_argument('--manual', action='store_true', help='Skip the AI and type the message yourself')

    # Output options
    parser.add_argument('--dry-run', action='store_true', help='Print the message instead of committing')
    parser.add_argument('--no-copy', action='store_true', help='Do not copy the message to the clipboard')
    parser.add_argument('--verbose', action='store_true', help='Show debug logs (provider probes, prompt size)')

    # Other commands
    parser.add_argument('--stats', type=int, nargs='?', const=100, default=None, metavar='N',
                        help='Show how many of the last N commits are conventional (default: 100)')
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
