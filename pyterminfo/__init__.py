"""
pyterminfo - read the terminfo database, and style terminal output with it.
"""

__version__ = "0.1.0"
version_info = tuple(map(int, __version__.split(".")))

from . import utils  # noqa
from .terminfo import TermInfo, expand, Variables  # noqa
from .terminal import Attr, Terminal, TerminfoTerminal, stdout, stderr  # noqa
from ._cli import cli  # noqa
