"""
Finding the compiled terminfo entry for a terminal, the way ncurses does.

Only the filesystem (directory tree) database is supported, not the
hashed database.
"""

import os
import logging


logger = logging.getLogger("pyterminfo")

# According to /etc/terminfo/README, after looking at ~/.terminfo,
# ncurses will search /etc/terminfo, then /lib/terminfo, and eventually
# /usr/share/terminfo.
DEFAULT_DIRS = ("/etc/terminfo", "/lib/terminfo", "/usr/share/terminfo")


def get_search_dirs(environ=None):
    """Get the list of directories to search, from most to least important."""
    environ = os.environ if environ is None else environ
    dirs = []

    if environ.get("TERMINFO"):
        dirs.append(environ["TERMINFO"])

    home = environ.get("HOME") or os.path.expanduser("~")
    if home and home != "~":
        dirs.append(os.path.join(home, ".terminfo"))

    if environ.get("TERMINFO_DIRS"):
        for path in environ["TERMINFO_DIRS"].split(":"):
            # An empty entry means the default locations
            if path:
                dirs.append(path)
            else:
                dirs.extend(DEFAULT_DIRS)

    dirs.extend(DEFAULT_DIRS)

    # Remove duplicates, preserving order
    return list(dict.fromkeys(dirs))


def get_dbpath_for_term(term, environ=None):
    """Get the path of the terminfo entry for the given terminal name.

    Returns None if there is no such entry.
    """
    if not term or "/" in term or term in (".", ".."):
        return None

    first_char = term[0]
    for dirpath in get_search_dirs(environ):
        if not os.path.isdir(dirpath):
            continue
        # On some systems (e.g. macOS) the subdir is named after the hex
        # code of the first char, because the filesystem is case-insensitive.
        for subdir in (first_char, f"{ord(first_char):x}"):
            path = os.path.join(dirpath, subdir, term)
            if os.path.isfile(path):
                logger.debug(f"found terminfo entry for {term!r} at {path}")
                return path
        logger.debug(f"no terminfo entry for {term!r} in {dirpath}")

    logger.debug(f"no terminfo entry for {term!r} in any search dir")
    return None
