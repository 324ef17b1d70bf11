"""
The terminfo database: decoding compiled entries, and expanding the
parameterized strings in them.

The decoder and the expander are pure functions; finding and reading an
entry is done by the ``TermInfo.from_*`` constructors.
"""

from ._errors import (  # noqa
    TerminfoError,
    DecodeError,
    DatabaseNotFound,
    TermUnset,
    InterpError,
    StackUnderflowError,
    MissingArgumentError,
    UnknownDirectiveError,
    ConditionalError,
)
from ._capnames import BOOLEAN_NAMES, NUMBER_NAMES, STRING_NAMES  # noqa
from ._record import TermInfo  # noqa
from ._decoder import decode, msys_terminfo, NumberFormat  # noqa
from ._params import expand, Variables  # noqa
from ._searcher import get_dbpath_for_term, get_search_dirs  # noqa
