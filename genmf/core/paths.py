"""
Path normalization for MSYS-style Makefiles.

Generated Makefiles run under an MSYS/Cygwin style shell on Windows, so
every path written into one uses forward slashes and the ``/c/...``
drive convention instead of ``C:\\...``.
"""
from __future__ import annotations

_PATH_FLAG_PREFIXES = ("-I", "-L")


def to_msys_path(path: str) -> str:
    """
    Normalize *path* to forward slashes and the ``/<drive>/`` convention.

    ``C:\\foo\\bar`` and ``C:/foo/bar`` both become ``/c/foo/bar``.
    Inputs shorter than four characters only get their slashes fixed.
    Idempotent.
    """
    s = path.replace("\\", "/")
    if len(s) < 4:
        return s
    if s[0].isalpha() and s[1:3] == ":/":
        return "/" + s[0].lower() + s[2:]
    return s


def normalize_flag(flag: str) -> str:
    """Normalize the path portion of an ``-I``/``-L`` flag, keep others as-is."""
    if flag.startswith(_PATH_FLAG_PREFIXES):
        return flag[:2] + to_msys_path(flag[2:])
    return flag
