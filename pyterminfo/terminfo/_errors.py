class TerminfoError(Exception):
    """Base class for errors in obtaining a terminfo entry."""


class DecodeError(TerminfoError):
    """A compiled terminfo entry could not be decoded.

    The ``section`` attribute names the part of the entry where decoding
    failed (e.g. "header", "names", "string table").
    """

    def __init__(self, section, message):
        super().__init__(f"invalid terminfo entry ({section}): {message}")
        self.section = section


class DatabaseNotFound(TerminfoError):
    """No terminfo entry could be found for a terminal name."""

    def __init__(self, term):
        super().__init__(f"no terminfo entry found for terminal {term!r}")
        self.term = term


class TermUnset(TerminfoError):
    """The environment does not say what the terminal is."""

    def __init__(self):
        super().__init__("environment variable TERM is not set")


class InterpError(Exception):
    """A capability template could not be expanded."""


class StackUnderflowError(InterpError):
    pass


class MissingArgumentError(InterpError):
    pass


class UnknownDirectiveError(InterpError):
    pass


class ConditionalError(InterpError):
    pass
