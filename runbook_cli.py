"""
runbook CLI

Entry point: argument parsing and dispatch only.
All command logic lives in cli.handlers.
"""

import sys
from typing import Sequence

from cli.wiring import build_parser, dispatch_command, split_invocation
from runbook import __version__


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser(version=__version__)
    options, invocation = split_invocation(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(options)
    if invocation:
        args.recipe, args.arguments = invocation[0], invocation[1:]
    return dispatch_command(parser, args)


if __name__ == "__main__":
    sys.exit(main())
