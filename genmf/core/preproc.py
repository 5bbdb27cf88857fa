"""
Preprocessing passes (``preproc.includes`` / ``preproc.macros``).

The IDE hands over compiler flags and sub-make arguments in one list,
separated by the ``-includes`` and ``-make-args`` markers.  Each pass
contributes its flags, source and output file to the replacement map
that later feeds the final Makefile as well.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from genmf.core.paths import normalize_flag, to_msys_path
from genmf.policy.profile import MakefileProfile
from genmf.policy.recipe import Recipe

INCLUDES_MARKER = "-includes"
MAKE_ARGS_MARKER = "-make-args"


@dataclass
class PreprocFlags:
    compiler_flags: List[str] = field(default_factory=list)
    make_args: List[str] = field(default_factory=list)


def split_preproc_flags(flags: Sequence[str]) -> PreprocFlags:
    """
    Split pass-through *flags* at the group markers.

    Flags before any marker count as compiler flags.
    """
    out = PreprocFlags()
    group = INCLUDES_MARKER
    for flag in flags:
        if flag in (INCLUDES_MARKER, MAKE_ARGS_MARKER):
            group = flag
            continue
        if group == MAKE_ARGS_MARKER:
            out.make_args.append(flag)
        else:
            out.compiler_flags.append(normalize_flag(flag))
    return out


def sub_make_args(build_root: str, recipe: Recipe, make_args: Sequence[str]) -> List[str]:
    """``-s -C <build root> <make args...> <recipe>``"""
    return ["-s", "-C", to_msys_path(build_root), *make_args, recipe.value]


def preproc_replacements(
    recipe: Recipe,
    *,
    system_path: str,
    variant_path: str,
    source: str,
    target: str,
    compiler_flags: Sequence[str],
    base: Optional[Mapping[str, str]] = None,
    profile: MakefileProfile | None = None,
) -> Dict[str, str]:
    """Merge this pass's keys over *base*."""
    if profile is None:
        profile = MakefileProfile.arduino()
    tok = profile.token
    kind = "INCLUDES" if recipe == Recipe.PREPROC_INCLUDES else "MACROS"

    replacements: Dict[str, str] = dict(base or {})
    replacements[tok("SYSTEM_PATH")] = to_msys_path(system_path)
    replacements[tok("VARIANT_PATH")] = to_msys_path(variant_path)
    replacements[tok(f"PREPROC_{kind}_FLAGS")] = "\t" + " ".join(compiler_flags)
    replacements[tok(f"PREPROC_{kind}_SOURCE")] = "\t" + to_msys_path(source)
    replacements[tok(f"PREPROC_{kind}_OUTFILE")] = "\t" + to_msys_path(target)
    return replacements
