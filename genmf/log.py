"""
Logging setup.

Verbosity levels follow the IDE's convention (0 = quiet, 3 = default,
5 = ``-Wall``, 9 = ``-Wextra``) and are mapped onto stdlib logging levels
for the stderr handler.  A syslog handler, when reachable, always gets
DEBUG records so that a failed IDE build can be reconstructed afterwards.
"""
from __future__ import annotations

import logging
import logging.handlers
import socket
import sys

from genmf import PACKAGE_NAME
from genmf.config import Settings

logger = logging.getLogger(__name__)

_FORMAT = "%(levelname)s %(name)s: %(message)s"


def level_for_verbosity(verbose: int) -> int:
    """Map an IDE verbosity level to a stdlib logging level."""
    if verbose <= 0:
        return logging.WARNING
    if verbose < 6:
        return logging.INFO
    return logging.DEBUG


def syslog_reachable(address: str) -> bool:
    """
    True if a syslog daemon listens on the unix socket *address*.

    SysLogHandler swallows a failed connect and then reports an error
    for every record, so the socket is tried before the handler exists.
    """
    if not hasattr(socket, "AF_UNIX") or sys.platform == "win32":
        return False
    for sock_type in (socket.SOCK_DGRAM, socket.SOCK_STREAM):
        sock = socket.socket(socket.AF_UNIX, sock_type)
        try:
            sock.connect(address)
        except OSError:
            continue
        finally:
            sock.close()
        return True
    return False


def configure_logging(verbose: int, settings: Settings | None = None) -> None:
    """Install the stderr handler and, if enabled, the syslog sink."""
    if settings is None:
        settings = Settings()

    root = logging.getLogger(PACKAGE_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)
    root.propagate = False

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level_for_verbosity(verbose))
    stderr_handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(stderr_handler)

    if settings.syslog and syslog_reachable(settings.syslog_address):
        try:
            sink = logging.handlers.SysLogHandler(address=settings.syslog_address)
        except OSError:
            return
        sink.ident = f"{PACKAGE_NAME}: "
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(sink)
