"""
Decoder for the compiled terminfo format, as written by ncurses' tic.

See ``man term(5)``. An entry consists of:

* a header of six little-endian 16-bit integers: magic number, size of
  the names section, number of booleans, number of numbers, number of
  string offsets, and size of the string table;
* the names section: the terminal names separated by "|", NUL-terminated;
* one byte per boolean, followed by a padding byte if needed to get at
  an even offset;
* one integer per number (16 or 32 bit, depending on the magic number);
* one 16-bit offset into the string table per string;
* the string table, containing NUL-terminated strings.

An extended section with user-defined capabilities may follow. We
ignore it.
"""

import enum
import struct
import logging

from ._errors import DecodeError
from ._record import TermInfo
from ._capnames import BOOLEAN_NAMES, NUMBER_NAMES, STRING_NAMES


logger = logging.getLogger("pyterminfo")

HEADER = struct.Struct("<6H")

# Special values used in the boolean, number and offset sections
ABSENT = -1
CANCELLED = -2
BOOLEAN_CANCELLED = 0xFE


class NumberFormat(enum.Enum):
    """The storage format of the numbers section, selected by the magic number."""

    LEGACY = 0o432  # 16-bit numbers
    EXTENDED = 0o1036  # 32-bit numbers, ncurses 6.1 and up

    @property
    def size(self):
        return 2 if self is NumberFormat.LEGACY else 4

    @property
    def code(self):
        return "h" if self is NumberFormat.LEGACY else "i"


class _Reader:
    """Read consecutive sections from a buffer, failing on truncation."""

    def __init__(self, data):
        self._data = memoryview(data)
        self.pos = 0

    def read(self, n, section):
        end = self.pos + n
        if end > len(self._data):
            raise DecodeError(
                section,
                f"truncated: need {n} bytes at offset {self.pos}, "
                f"but only {len(self._data) - self.pos} left",
            )
        chunk = bytes(self._data[self.pos : end])
        self.pos = end
        return chunk

    def unpack(self, fmt, count, section):
        if count == 0:
            return ()
        item_size = struct.calcsize("<" + fmt)
        return struct.unpack(f"<{count}{fmt}", self.read(count * item_size, section))


def decode(data):
    """Decode a compiled terminfo entry into a TermInfo object.

    The given data must be a bytes-like object, e.g. the contents of a
    file in a terminfo directory. Raises DecodeError if the data is not a
    valid entry. There is no partial result.
    """
    reader = _Reader(data)

    # Header
    magic, names_size, bool_count, num_count, str_count, table_size = HEADER.unpack(
        reader.read(HEADER.size, "header")
    )
    try:
        number_format = NumberFormat(magic)
    except ValueError:
        raise DecodeError(
            "header",
            f"bad magic number {magic:#o}, expected {NumberFormat.LEGACY.value:#o} "
            f"or {NumberFormat.EXTENDED.value:#o}",
        ) from None
    logger.debug(
        f"terminfo header: {number_format.name} format, names={names_size} "
        f"booleans={bool_count} numbers={num_count} strings={str_count} "
        f"table={table_size}"
    )

    if names_size == 0:
        raise DecodeError("header", "empty names section")
    if bool_count > len(BOOLEAN_NAMES):
        raise DecodeError("header", f"too many booleans ({bool_count})")
    if num_count > len(NUMBER_NAMES):
        raise DecodeError("header", f"too many numbers ({num_count})")
    if str_count > len(STRING_NAMES):
        raise DecodeError("header", f"too many strings ({str_count})")

    # Names
    names_bytes = reader.read(names_size, "names")
    if names_bytes[-1] != 0:
        raise DecodeError("names", "names section is not NUL-terminated")
    try:
        names = names_bytes[:-1].decode("utf-8").split("|")
    except UnicodeDecodeError:
        raise DecodeError("names", "names are not valid utf-8") from None
    if not names[0]:
        raise DecodeError("names", "empty terminal name")

    # Booleans
    booleans = {}
    for name, value in zip(BOOLEAN_NAMES, reader.read(bool_count, "booleans")):
        if value and value != BOOLEAN_CANCELLED:
            booleans[name] = True
    if (names_size + bool_count) % 2:
        reader.read(1, "booleans")  # padding to an even offset

    # Numbers
    numbers = {}
    values = reader.unpack(number_format.code, num_count, "numbers")
    for name, value in zip(NUMBER_NAMES, values):
        # ABSENT and CANCELLED are the common ones, but any negative
        # value means the number is not there.
        if value >= 0:
            numbers[name] = value

    # Strings
    offsets = reader.unpack("h", str_count, "strings")
    table = reader.read(table_size, "string table")
    strings = {}
    for name, offset in zip(STRING_NAMES, offsets):
        if offset in (ABSENT, CANCELLED):
            continue
        if offset < 0 or offset >= table_size:
            raise DecodeError(
                "string table", f"offset {offset} for {name!r} out of range"
            )
        end = table.find(b"\x00", offset)
        if end < 0:
            raise DecodeError("string table", f"missing NUL in string {name!r}")
        strings[name] = table[offset:end]

    if reader.pos < len(data):
        logger.debug(f"ignoring {len(data) - reader.pos} bytes of extended data")

    return TermInfo(names, booleans, numbers, strings)


def msys_terminfo():
    """Get a built-in entry for the msys (mintty) terminal.

    Msys is a fork of an older Cygwin version, and does not ship a
    terminfo database that we can find, so we provide the basics.
    """
    return TermInfo(
        names=("cygwin",),
        numbers={"colors": 8},
        strings={
            "sgr0": b"\x1b[0m",
            "bold": b"\x1b[1m",
            "setaf": b"\x1b[3%p1%dm",
            "setab": b"\x1b[4%p1%dm",
        },
    )
