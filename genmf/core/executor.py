"""
External executor — run make (or any tool) with the IDE's search paths.

The uploader, compiler and auxiliary-command directories are put in
front of ``PATH`` (uploader first) and ``LANG`` is forced so that
diagnostics come out in a parseable form.  The call blocks until the
child exits; there is no timeout.
"""
from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from genmf.errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_NOT_FOUND = 127


@dataclass
class SearchPaths:
    """Directories prepended to PATH, each optional."""
    cmds_path: str = ""
    compiler_path: str = ""
    uploader_path: str = ""

    def augment(self, path: str) -> str:
        for extra in (self.cmds_path, self.compiler_path, self.uploader_path):
            if extra:
                path = extra + os.pathsep + path if path else extra
        return path


@dataclass
class ExecResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""
    argv: List[str] = field(default_factory=list)


def build_env(
    search_paths: SearchPaths,
    locale: str = "C",
    extra: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Child environment: *base* (default os.environ) plus the overrides."""
    env = dict(os.environ if base is None else base)
    env["PATH"] = search_paths.augment(env.get("PATH", ""))
    env["LANG"] = locale
    if extra:
        env.update(extra)
    return env


def exit_status(returncode: Optional[int]) -> int:
    """
    Translate a Popen return code into a process exit status.

    A POSIX child killed by signal N maps to 128+N.  Anything else
    without a conventional status is fatal.
    """
    if returncode is None:
        raise UnsupportedPlatformError("child process has no exit status")
    if returncode < 0:
        if os.name != "posix":
            raise UnsupportedPlatformError(
                f"child process ended with status {returncode} "
                "on a platform without signal semantics"
            )
        return 128 - returncode
    return returncode


def run_command(
    exe: str,
    args: Sequence[str] = (),
    *,
    search_paths: Optional[SearchPaths] = None,
    locale: str = "C",
    extra_env: Optional[Mapping[str, str]] = None,
    capture: bool = False,
    cwd: Optional[str] = None,
) -> ExecResult:
    """
    Run *exe* with *args* and wait for it.

    With ``capture=True`` stdout/stderr are returned in the result;
    otherwise the child inherits this process's streams.
    """
    env = build_env(search_paths or SearchPaths(), locale, extra_env)
    argv = [exe, *args]
    logger.debug("PATH=%s", env["PATH"])
    logger.info("%s", " ".join(argv))

    try:
        proc = subprocess.run(
            argv,
            env=env,
            cwd=cwd,
            capture_output=capture,
            text=capture,
            errors="replace" if capture else None,
        )
    except FileNotFoundError as exc:
        logger.error("cannot run %s: %s", exe, exc)
        return ExecResult(returncode=EXIT_NOT_FOUND, stderr=str(exc), argv=argv)

    status = exit_status(proc.returncode)
    if status != 0:
        logger.warning("%s exited with status %d", exe, status)
    else:
        logger.debug("%s exited with status 0", exe)

    return ExecResult(
        returncode=status,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        argv=argv,
    )
