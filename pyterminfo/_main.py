import sys
import logging

from .terminfo import TermInfo, expand


logger = logging.getLogger("pyterminfo")


def load(term=None):
    """Load the entry for the given terminal, or the current one."""
    if term:
        return TermInfo.from_name(term)
    return TermInfo.from_env()


def dump(terminfo, file=None):
    """Print all capabilities of a terminfo entry, in a human readable way."""
    file = file or sys.stdout
    write = file.write

    write(f"{terminfo.name}\n")
    write(f"    aliases: {', '.join(terminfo.names[1:]) or '-'}\n")

    write("\nbooleans\n")
    for cap in sorted(terminfo.booleans):
        write(f"    {cap}\n")

    write("\nnumbers\n")
    for cap, value in sorted(terminfo.numbers.items()):
        write(f"    {cap:<8} {value}\n")

    write("\nstrings\n")
    for cap, value in sorted(terminfo.strings.items()):
        write(f"    {cap:<8} {value!r}\n")


def parse_param(text):
    """Command line arguments that look like integers are numbers, the rest strings."""
    try:
        return int(text)
    except ValueError:
        return text.encode()


def main(term=None, cap=None, args=()):
    terminfo = load(term)
    if cap is None:
        dump(terminfo)
        return

    template = terminfo.strings.get(cap)
    if template is None:
        raise LookupError(f"{terminfo.name} has no string capability {cap!r}")
    logger.debug(f"expanding {cap}={template!r} with {list(args)}")
    bb = expand(template, [parse_param(arg) for arg in args])
    sys.stdout.buffer.write(bb)
    sys.stdout.buffer.flush()
