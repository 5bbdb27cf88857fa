"""
Writer — place rendered Makefiles on disk.

Filesystem layout:
    <build_root>/<template name without ".template">   (default)
    <makefile>                                         (explicit)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from genmf.io.store import write_text_replace
from genmf.policy.profile import MakefileProfile

logger = logging.getLogger(__name__)


def default_makefile_name(template: Path, profile: MakefileProfile) -> str:
    """``Makefile.template`` -> ``Makefile``."""
    return template.name.replace(profile.template_suffix, "")


def makefile_output_path(
    template: Path,
    build_root: Path,
    makefile: Optional[str],
    profile: MakefileProfile,
) -> Path:
    """
    Resolve where the generated Makefile goes.

    An explicit *makefile* is used as given; otherwise the template's
    name, minus its marker suffix, is placed under *build_root*.
    """
    if makefile:
        return Path(makefile)
    return build_root / default_makefile_name(template, profile)


def write_makefile(path: Path, text: str) -> Path:
    """
    Write *text* to *path*, creating parent directories.

    The content is rendered before this call and swapped in with a
    single rename, so a reader never sees a half-written Makefile.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    write_text_replace(path, text)
    logger.info("wrote %s", path)
    return path


def preproc_makefile_path(
    template: Path,
    build_root: Path,
    makefile: Optional[str],
    profile: MakefileProfile,
) -> Path:
    """The preprocessing sub-make always runs in *build_root*."""
    return build_root / (makefile or default_makefile_name(template, profile))
