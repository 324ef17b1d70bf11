import sys
import argparse

from ._main import main
from .terminfo import TerminfoError, InterpError
from .utils import listen_to_logs
from . import __version__


def make_parser():
    parser = argparse.ArgumentParser(
        prog="pyterminfo",
        description="Show a terminfo entry, or expand one of its string capabilities.",
    )
    parser.add_argument("--version", action="version", version=f"pyterminfo {__version__}")
    parser.add_argument(
        "--listen", action="store_true", help="Print the logs of other pyterminfo processes."
    )
    parser.add_argument(
        "-T", dest="term", metavar="TERM", help="The terminal type (default: $TERM)."
    )
    parser.add_argument("cap", nargs="?", help="A string capability to expand, e.g. setaf.")
    parser.add_argument("args", nargs="*", help="Arguments for the capability.")
    return parser


def cli(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    ns = make_parser().parse_args(argv)
    if ns.listen:
        listen_to_logs()
        return 0
    try:
        main(ns.term, ns.cap, ns.args)
    except (TerminfoError, InterpError, LookupError, OSError) as err:
        sys.stderr.write(f"pyterminfo: {err}\n")
        return 1
    return 0
