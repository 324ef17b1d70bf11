"""
Expansion of parameterized string capabilities (like tparm() in curses).

String capabilities such as "setaf" and "cup" are templates in a small
stack-based language. Directives start with "%", everything else is
copied to the output as-is. For example, with xterm's "cup" template
``\\E[%i%p1%d;%p2%dH``, row 4 and column 9 expand to ``\\E[5;10H``.

The directives are described in ``man terminfo(5)``, section
"Parameterized Strings".
"""

import operator

from ._errors import (
    InterpError,
    StackUnderflowError,
    MissingArgumentError,
    UnknownDirectiveError,
    ConditionalError,
)


class Variables:
    """The variables available to templates.

    There are 26 dynamic variables (a-z) and 26 static variables (A-Z).
    The dynamic variables are reset at the start of each expansion. The
    static variables keep their value for as long as this object lives,
    so one instance should be used per terminal.
    """

    def __init__(self):
        self.static = [0] * 26
        self.dynamic = [0] * 26

    def clear_dynamic(self):
        self.dynamic = [0] * 26

    def _slot(self, letter):
        if "a" <= letter <= "z":
            return self.dynamic, ord(letter) - ord("a")
        elif "A" <= letter <= "Z":
            return self.static, ord(letter) - ord("A")
        raise InterpError(f"invalid variable name {letter!r}")

    def get(self, letter):
        slots, index = self._slot(letter)
        return slots[index]

    def set(self, letter, value):
        slots, index = self._slot(letter)
        slots[index] = value


def _div(x, y):
    # C semantics: truncate towards zero
    if y == 0:
        raise InterpError("division by zero")
    q = abs(x) // abs(y)
    return q if (x < 0) == (y < 0) else -q


def _mod(x, y):
    if y == 0:
        raise InterpError("division by zero")
    return x - y * _div(x, y)


BINARY_OPS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _div,
    "m": _mod,
    "&": operator.and_,
    "|": operator.or_,
    "^": operator.xor,
    "=": lambda x, y: int(x == y),
    ">": lambda x, y: int(x > y),
    "<": lambda x, y: int(x < y),
    "A": lambda x, y: int(bool(x) and bool(y)),
    "O": lambda x, y: int(bool(x) or bool(y)),
}

UNARY_OPS = {
    "!": lambda x: int(not x),
    "~": operator.invert,
}

DIGITS = "0123456789"
FORMAT_START = ":# ." + DIGITS
FORMAT_CONVERSIONS = "doxXs"


def to_param(value):
    """Normalize an argument to either an int or bytes."""
    if isinstance(value, int):
        return int(value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    elif isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(
        f"capability arguments must be int, bytes or str, not {type(value).__name__}"
    )


def expand(template, params=(), variables=None):
    """Expand a capability template with the given arguments.

    The template is a bytes object as found in ``TermInfo.strings``. The
    params are ints or strings (bytes or str), referred to as %p1 to %p9
    in the template. The variables is a ``Variables`` object that holds
    the static variables for the current terminal; if not given, a fresh
    one is used.

    Returns the resulting bytes. Raises InterpError (or one of its
    subclasses) if the template is invalid, or does not match the given
    arguments.
    """
    if isinstance(template, str):
        template = template.encode("latin-1")
    if variables is None:
        variables = Variables()
    variables.clear_dynamic()
    return _Expansion(bytes(template), [to_param(p) for p in params], variables).run()


class _Expansion:
    """The state of a single expansion."""

    def __init__(self, template, params, variables):
        self._template = template
        self._params = params
        self._vars = variables
        self._stack = []
        self._output = bytearray()
        self._depth = 0  # conditional nesting
        self._incremented = False

    def run(self):
        template = self._template
        pos = 0
        while pos < len(template):
            i = template.find(b"%", pos)
            if i < 0:
                self._output += template[pos:]
                break
            self._output += template[pos:i]
            pos = self._directive(i + 1)
        if self._depth:
            raise ConditionalError("unterminated conditional")
        return bytes(self._output)

    # %% Helpers

    def _char(self, pos):
        if pos >= len(self._template):
            raise InterpError("template ends inside a directive")
        return chr(self._template[pos])

    def _push(self, value):
        self._stack.append(value)

    def _pop(self, directive):
        if not self._stack:
            raise StackUnderflowError(f"stack is empty at %{directive}")
        return self._stack.pop()

    def _pop_number(self, directive):
        value = self._pop(directive)
        if not isinstance(value, int):
            raise InterpError(f"%{directive} needs a number, got a string")
        return value

    def _pop_string(self, directive):
        value = self._pop(directive)
        if not isinstance(value, bytes):
            raise InterpError(f"%{directive} needs a string, got a number")
        return value

    # %% Directives

    def _directive(self, pos):
        """Execute the directive at pos (just after the %), return the new pos."""
        c = self._char(pos)
        pos += 1

        if c == "%":
            self._output += b"%"
        elif c in BINARY_OPS:
            y = self._pop_number(c)
            x = self._pop_number(c)
            self._push(BINARY_OPS[c](x, y))
        elif c in UNARY_OPS:
            self._push(UNARY_OPS[c](self._pop_number(c)))
        elif c == "c":
            self._output.append(self._pop_number(c) & 0xFF)
        elif c == "l":
            self._push(len(self._pop_string(c)))
        elif c == "p":
            digit = self._char(pos)
            if not "1" <= digit <= "9":
                raise InterpError(f"invalid parameter number in %p{digit}")
            index = int(digit) - 1
            if index >= len(self._params):
                raise MissingArgumentError(
                    f"%p{digit} used, but only {len(self._params)} arguments given"
                )
            self._push(self._params[index])
            pos += 1
        elif c == "P":
            self._vars.set(self._char(pos), self._pop(c))
            pos += 1
        elif c == "g":
            self._push(self._vars.get(self._char(pos)))
            pos += 1
        elif c == "'":
            char = self._char(pos)
            if self._char(pos + 1) != "'":
                raise InterpError("unterminated character constant")
            self._push(ord(char))
            pos += 2
        elif c == "{":
            end = self._template.find(b"}", pos)
            digits = self._template[pos:end] if end >= 0 else b""
            if not digits.isdigit():
                raise InterpError("invalid integer constant")
            self._push(int(digits))
            pos = end + 1
        elif c == "i":
            self._increment_params()
        elif c == "?":
            self._depth += 1
        elif c == "t":
            # The %? is optional, as in "%p1%{1}%=%tA%eB%;"
            if not self._depth:
                self._depth = 1
            if not self._pop_number(c):
                pos = self._skip(pos, to_else=True)
        elif c == "e":
            if not self._depth:
                raise ConditionalError("%e outside of a conditional")
            # The then-part was executed, skip the rest
            pos = self._skip(pos, to_else=False)
        elif c == ";":
            if not self._depth:
                raise ConditionalError("%; without matching %?")
            self._depth -= 1
        elif c in FORMAT_CONVERSIONS or c in FORMAT_START:
            pos = self._format(pos - 1)
        else:
            raise UnknownDirectiveError(f"unknown directive %{c}")
        return pos

    def _increment_params(self):
        # Only the first %i counts
        if self._incremented:
            return
        self._incremented = True
        for i in range(min(2, len(self._params))):
            if not isinstance(self._params[i], int):
                raise InterpError("%i needs numeric arguments")
            self._params[i] += 1

    def _skip(self, pos, to_else):
        """Skip to just after the matching %e (if to_else) or %;."""
        template = self._template
        level = 0
        while True:
            pos = template.find(b"%", pos)
            if pos < 0 or pos + 1 >= len(template):
                raise ConditionalError("unterminated conditional")
            c = chr(template[pos + 1])
            pos += 2
            if c == "?":
                level += 1
            elif c == ";":
                if level == 0:
                    self._depth -= 1
                    return pos
                level -= 1
            elif c == "e" and level == 0 and to_else:
                return pos

    def _format(self, pos):
        """Parse a printf-style clause like ":-5d" or "02x", and output the result."""
        char = self._char
        flags = ""
        allowed = "# 0"
        if char(pos) == ":":
            allowed = "-+# 0"
            pos += 1
        while char(pos) in allowed:
            flag = char(pos)
            if flag in flags:
                raise InterpError(f"repeated flag {flag!r} in format")
            flags += flag
            pos += 1
        width = ""
        while char(pos) in DIGITS:
            width += char(pos)
            pos += 1
        precision = None
        if char(pos) == ".":
            pos += 1
            precision = ""
            while char(pos) in DIGITS:
                precision += char(pos)
                pos += 1
        conv = char(pos)
        if conv not in FORMAT_CONVERSIONS:
            raise InterpError(f"invalid format conversion {conv!r}")

        if precision is not None:
            precision = int(precision or 0)
        value = self._pop(conv)
        self._output += format_value(value, conv, flags, int(width or 0), precision)
        return pos + 1


def format_value(value, conv, flags="", width=0, precision=None):
    """Format a value like C's printf would, for the conversions d, o, x, X and s."""
    if "-" in flags and "0" in flags:
        raise InterpError("flags '-' and '0' cannot be combined")
    if "+" in flags and " " in flags:
        raise InterpError("flags '+' and ' ' cannot be combined")
    if "#" in flags and conv in "ds":
        raise InterpError(f"flag '#' cannot be used with %{conv}")
    if ("+" in flags or " " in flags) and conv in "oxXs":
        raise InterpError(f"sign flags cannot be used with %{conv}")
    if "0" in flags and conv == "s":
        raise InterpError("flag '0' cannot be used with %s")

    if conv == "s":
        if not isinstance(value, bytes):
            raise InterpError("%s needs a string, got a number")
    else:
        if not isinstance(value, int):
            raise InterpError(f"%{conv} needs a number, got a string")
        if conv != "d" and value < 0:
            value &= 0xFFFFFFFF  # unsigned, as C's int
        if precision is not None:
            flags = flags.replace("0", "")  # the precision gives the zeros
        if "#" in flags:
            if value == 0:
                flags = flags.replace("#", "")
            elif conv == "o":
                # C only guarantees a leading zero, Python would add "0o"
                flags = flags.replace("#", "")
                precision = max(precision or 0, len(f"{value:o}") + 1)

    spec = "%" + flags
    if width:
        spec += str(width)
    if precision is not None:
        spec += "." + str(precision)
    spec += conv
    return spec.encode("ascii") % value
