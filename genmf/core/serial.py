"""Serial port name -> ``USBDEVBASENAME``/``MOTE`` make variables."""
from __future__ import annotations

import logging
import re
import sys
from typing import List, Optional

logger = logging.getLogger(__name__)

_PATTERNS = {
    "win32": re.compile(r"^(COM)([0-9]*)(\s*)$"),
    "linux": re.compile(r"^([^0-9]*)([0-9]*)$"),
    "darwin": re.compile(r"^(/dev/.*-)(.*?)(\s*)$"),
}


def serial_make_args(port: str, platform: Optional[str] = None) -> List[str]:
    """
    Split *port* into device base name and mote number.

    ``COM3`` -> ``USBDEVBASENAME=COM MOTE=3`` on Windows,
    ``/dev/ttyUSB0`` -> ``USBDEVBASENAME=/dev/ttyUSB MOTE=0`` on Linux.
    macOS callout devices are swapped for their tty twins.  Returns []
    for an empty port, an unknown platform or an unmatched name.
    """
    if not port:
        return []
    if platform is None:
        platform = sys.platform
    key = "linux" if platform.startswith("linux") else platform
    pattern = _PATTERNS.get(key)
    if pattern is None:
        logger.debug("no serial port convention for %s", platform)
        return []

    m = pattern.match(port)
    if m is None:
        logger.warning("serial port %r not understood on %s, ignored", port, platform)
        return []

    base = m.group(1)
    if key == "darwin":
        base = base.replace("/dev/cu.usbserial", "/dev/tty.usbserial")
    return [f"USBDEVBASENAME={base}", f"MOTE={m.group(2)}"]
