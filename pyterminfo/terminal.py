"""
A terminal that styles its output using the terminfo database.

This is the layer that turns "bold" or "foreground red" into the right
bytes for the terminal at hand: it looks up the capability for an
attribute, expands it, and writes the result to the output stream.
"""

import sys
import enum
import shutil
import logging

from .terminfo import TermInfo, TerminfoError, InterpError, Variables, expand


logger = logging.getLogger("pyterminfo")


class Attr(enum.Enum):
    """Text attributes.

    Most attributes can only be turned on, and must be turned off with
    ``reset()``. The ones with a NO_ counterpart can be turned off
    explicitly.
    """

    BOLD = "bold"
    DIM = "dim"  # also called faint or half-bright, often not supported
    ITALIC = "italic"  # often not supported
    NO_ITALIC = "no_italic"
    UNDERLINE = "underline"
    NO_UNDERLINE = "no_underline"
    BLINK = "blink"
    STANDOUT = "standout"  # often implemented as reverse
    NO_STANDOUT = "no_standout"
    REVERSE = "reverse"
    SECURE = "secure"  # aka invisible
    FOREGROUND_COLOR = "foreground_color"
    BACKGROUND_COLOR = "background_color"


CAP_FOR_ATTR = {
    Attr.BOLD: "bold",
    Attr.DIM: "dim",
    Attr.ITALIC: "sitm",
    Attr.NO_ITALIC: "ritm",
    Attr.UNDERLINE: "smul",
    Attr.NO_UNDERLINE: "rmul",
    Attr.BLINK: "blink",
    Attr.STANDOUT: "smso",
    Attr.NO_STANDOUT: "rmso",
    Attr.REVERSE: "rev",
    Attr.SECURE: "invis",
    Attr.FOREGROUND_COLOR: "setaf",
    Attr.BACKGROUND_COLOR: "setab",
}

# Capabilities to reset all attributes, in order of preference, with their args
RESET_CAPS = (("sgr0", ()), ("sgr", (0,) * 9), ("op", ()))


class Terminal:
    """Base class for a terminal with ANSI-terminal-like capabilities.

    The methods that style the output return True if the terminal
    supports what was asked, and something was written.
    """

    def fg(self, color):
        """Set the foreground color.

        If the color is a bright color, but the terminal only supports 8
        colors, the corresponding normal color is used instead.
        """
        raise NotImplementedError()

    def bg(self, color):
        """Set the background color (see ``fg()``)."""
        raise NotImplementedError()

    def attr(self, attr, color=None):
        """Set the given attribute, if supported."""
        raise NotImplementedError()

    def supports_attr(self, attr):
        raise NotImplementedError()

    def reset(self):
        """Reset all attributes and colors to the default."""
        raise NotImplementedError()

    def get_size(self):
        """Get the (estimate) terminal size."""
        # This should work on both Unix and Windows, but the subclasses
        # can nevertheless override this.
        return shutil.get_terminal_size()


class TerminfoTerminal(Terminal):
    """A terminal that uses the control sequences from a terminfo entry.

    The output must be a binary file object, e.g. ``sys.stdout.buffer``.
    """

    def __init__(self, out, terminfo: TermInfo):
        self.out = out
        self.terminfo = terminfo
        # Static template variables live as long as the terminal
        self._vars = Variables()

        strings = terminfo.strings
        if "setaf" in strings and "setab" in strings:
            self.num_colors = terminfo.numbers.get("colors", 0)
        else:
            self.num_colors = 0

    @classmethod
    def from_env(cls, out, environ=None):
        """Create a terminal for the current environment.

        Returns None when the terminfo entry cannot be found or decoded.
        """
        try:
            terminfo = TermInfo.from_env(environ)
        except TerminfoError as err:
            logger.info(f"no terminfo available: {err}")
            return None
        return cls(out, terminfo)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.terminfo.name!r} at {hex(id(self))}>"

    def write(self, bb):
        return self.out.write(bb)

    def flush(self):
        self.out.flush()

    def fg(self, color):
        color = self._dim_if_necessary(color)
        if color < self.num_colors:
            return self.apply_cap("setaf", (color,))
        return False

    def bg(self, color):
        color = self._dim_if_necessary(color)
        if color < self.num_colors:
            return self.apply_cap("setab", (color,))
        return False

    def attr(self, attr, color=None):
        if attr in (Attr.FOREGROUND_COLOR, Attr.BACKGROUND_COLOR) and color is None:
            raise ValueError(f"{attr} needs a color")
        if attr is Attr.FOREGROUND_COLOR:
            return self.fg(color)
        elif attr is Attr.BACKGROUND_COLOR:
            return self.bg(color)
        return self.apply_cap(CAP_FOR_ATTR[attr])

    def supports_attr(self, attr):
        if attr in (Attr.FOREGROUND_COLOR, Attr.BACKGROUND_COLOR):
            return self.num_colors > 0
        return CAP_FOR_ATTR[attr] in self.terminfo.strings

    def reset(self):
        # Are there any terminals that have color/attrs and not sgr0?
        # Fall back to sgr, then op.
        for cap, params in RESET_CAPS:
            if cap in self.terminfo.strings:
                return self.apply_cap(cap, params)
        return False

    def apply_cap(self, cap, params=()):
        """Expand the given string capability and write it.

        Returns False if the terminal does not have the capability, or
        if the template could not be expanded.
        """
        template = self.terminfo.strings.get(cap)
        if template is None:
            return False
        try:
            bb = expand(template, params, self._vars)
        except InterpError as err:
            logger.warning(f"could not expand {cap!r} for {self.terminfo.name}: {err}")
            return False
        self.out.write(bb)
        return True

    def _dim_if_necessary(self, color):
        if self.num_colors <= color < 16 and color >= 8:
            return color - 8
        return color


def stdout():
    """Get a terminal for stdout, or None if it cannot be created."""
    return TerminfoTerminal.from_env(sys.stdout.buffer)


def stderr():
    """Get a terminal for stderr, or None if it cannot be created."""
    return TerminfoTerminal.from_env(sys.stderr.buffer)
