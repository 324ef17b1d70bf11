import os
import logging
from types import MappingProxyType
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from ._errors import TerminfoError, DatabaseNotFound, TermUnset


logger = logging.getLogger("pyterminfo")


@dataclass(frozen=True)
class TermInfo:
    """A decoded terminfo entry.

    The capability maps are keyed by the terminfo short codes ("am",
    "colors", "setaf", ...). A capability that the terminal does not
    have is simply not in the map. String values are the raw templates,
    to be expanded with ``expand()``.

    Instances are read-only; the maps are exposed as mapping proxies.
    """

    names: Tuple[str, ...]
    booleans: Mapping[str, bool] = field(default_factory=dict)
    numbers: Mapping[str, int] = field(default_factory=dict)
    strings: Mapping[str, bytes] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the containers too, not just the attributes
        object.__setattr__(self, "names", tuple(self.names))
        for attr in ("booleans", "numbers", "strings"):
            value = getattr(self, attr)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, attr, MappingProxyType(dict(value)))

    def __repr__(self):
        return (
            f"<TermInfo {self.name!r} with {len(self.booleans)} booleans, "
            f"{len(self.numbers)} numbers, {len(self.strings)} strings>"
        )

    @property
    def name(self) -> str:
        """The canonical name of the terminal."""
        return self.names[0]

    def get_flag(self, cap: str) -> bool:
        return self.booleans.get(cap, False)

    def get_number(self, cap: str) -> Optional[int]:
        return self.numbers.get(cap)

    def get_string(self, cap: str) -> Optional[bytes]:
        return self.strings.get(cap)

    # Constructors that touch the filesystem or environment. The decoder
    # itself is pure, these are the glue around it.

    @classmethod
    def from_path(cls, path):
        """Read and decode the compiled entry at the given path."""
        from ._decoder import decode

        with open(path, "rb") as fh:
            data = fh.read()
        logger.debug(f"decoding terminfo entry {path} ({len(data)} bytes)")
        return decode(data)

    @classmethod
    def from_name(cls, name, environ=None):
        """Find the entry for the named terminal and decode it."""
        from ._searcher import get_dbpath_for_term

        path = get_dbpath_for_term(name, environ)
        if path is None:
            raise DatabaseNotFound(name)
        return cls.from_path(path)

    @classmethod
    def from_env(cls, environ=None):
        """Get the entry for the terminal given by the TERM environment variable.

        If that fails, and we appear to be running in the msys mintty
        terminal, a small built-in entry is returned instead.
        """
        from ._decoder import msys_terminfo

        environ = os.environ if environ is None else environ
        term = environ.get("TERM")
        if not term:
            raise TermUnset()
        try:
            return cls.from_name(term, environ)
        except TerminfoError as err:
            if environ.get("MSYSCON") == "mintty.exe":
                logger.info(f"using built-in msys entry ({err})")
                return msys_terminfo()
            raise
