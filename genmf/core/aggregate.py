"""
Aggregation — fold recorded build steps into Makefile replacements.

Sources are grouped by stage and path prefix:

    core       compile step, stage "core", source under the core root
    variant    compile step, stage "core", source under the variant root
    libraries  compile step, stage "libraries"
    sketch     compile step, stage "sketch"

A core-stage source must sit under exactly one of the two roots; one
under neither (or, with nested roots, under both) belongs to no group.
Project metadata comes from the single link step.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from genmf.core.paths import normalize_flag, to_msys_path
from genmf.errors import MissingLinkStepError
from genmf.io.schema import StepRecord
from genmf.policy.profile import MakefileProfile
from genmf.policy.recipe import Recipe, Stage

logger = logging.getLogger(__name__)


@dataclass
class SourceGroups:
    """Normalized source paths per group, in record order."""
    core: List[str] = field(default_factory=list)
    variant: List[str] = field(default_factory=list)
    libraries: List[str] = field(default_factory=list)
    sketch: List[str] = field(default_factory=list)


def select_records(
    records: Sequence[StepRecord],
    predicate: Callable[[StepRecord], bool],
) -> List[StepRecord]:
    return [r for r in records if predicate(r)]


def _under(path: str, root: str) -> bool:
    return bool(root) and path.startswith(root)


def group_sources(
    records: Sequence[StepRecord],
    core_root: str,
    variant_root: str,
) -> SourceGroups:
    groups = SourceGroups()
    for rec in records:
        if not rec.is_compile:
            continue
        src = to_msys_path(rec.source)
        if rec.stage == Stage.CORE.value:
            in_core = _under(rec.source, core_root)
            in_variant = _under(rec.source, variant_root)
            if in_core and not in_variant:
                groups.core.append(src)
            elif in_variant and not in_core:
                groups.variant.append(src)
            else:
                logger.debug("core-stage source outside a single root: %s",
                             rec.source)
        elif rec.stage == Stage.LIBRARIES.value:
            groups.libraries.append(src)
        elif rec.stage == Stage.SKETCH.value:
            groups.sketch.append(src)
    return groups


def format_source_block(paths: Sequence[str]) -> str:
    """Tab-indented, backslash-continued Makefile list."""
    return "\t" + " \\\n\t".join(paths) + "\n"


def collect_sketch_flags(records: Sequence[StepRecord]) -> List[str]:
    """
    Compiler flags of every sketch compile step, de-duplicated across
    records in first-seen order, with ``-I``/``-L`` paths normalized.
    """
    seen: Dict[str, None] = {}
    for rec in records:
        if not (rec.is_compile and rec.stage == Stage.SKETCH.value):
            continue
        for flag in rec.flags:
            seen.setdefault(normalize_flag(flag), None)
    return list(seen)


def find_link_step(records: Sequence[StepRecord], build_root: str) -> StepRecord:
    """The ``ld`` record; raises MissingLinkStepError if none was recorded."""
    links = select_records(records, lambda r: r.recipe == Recipe.LD.value)
    if not links:
        raise MissingLinkStepError(build_root)
    if len(links) > 1:
        logger.warning("%d link steps recorded, using %s",
                       len(links), links[0].target)
    return links[0]


def build_replacements(
    records: Sequence[StepRecord],
    *,
    build_root: str,
    core_root: str = "",
    variant_root: str = "",
    variant_name: str = "",
    platform_version: str = "",
    base: Optional[Mapping[str, str]] = None,
    profile: MakefileProfile | None = None,
) -> Dict[str, str]:
    """
    Derive the full replacement map for the final Makefile.

    *base* is the map accumulated by earlier preprocessing invocations;
    keys computed here take precedence over it.  Empty *core_root* or
    *variant_root* fall back to the link step's recorded paths.
    """
    if profile is None:
        profile = MakefileProfile.arduino()
    tok = profile.token

    ld = find_link_step(records, build_root)
    groups = group_sources(
        records,
        core_root or ld.core_path,
        variant_root or ld.variant_path,
    )

    replacements: Dict[str, str] = dict(base or {})
    replacements.update({
        tok("CFLAGS"): " ".join(collect_sketch_flags(records)),
        tok("PROJECT_NAME"): to_msys_path(ld.project_name),
        tok("SYSTEM_PATH"): to_msys_path(ld.system_path),
        tok("BUILD_PATH"): to_msys_path(ld.build_path),
        tok("CORE_PATH"): to_msys_path(ld.core_path),
        tok("VARIANT_PATH"): to_msys_path(ld.variant_path),
        tok("ARCHIVE_FILE"): to_msys_path(ld.archive_file),
        tok("CORES_SRCS"): format_source_block(groups.core),
        tok("VARIANT_SRCS"): format_source_block(groups.variant),
        tok("LIBRARIES_SRCS"): format_source_block(groups.libraries),
        tok("SKETCH_SRCS"): format_source_block(groups.sketch),
        tok("VARIANT"): variant_name,
        tok("PLATFORM_VERSION"): platform_version,
    })
    return replacements
