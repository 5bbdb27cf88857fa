"""
Runner — one handler per recipe, plus the ``genmf`` CLI.

Step recipes (cpp.o, c.o, S.o, ar, ld) record a sidecar; ``stage``
sets the stage stamped onto the following steps; ``preproc.*`` render
and run a preprocessing sub-make; ``makefile`` aggregates every sidecar
into the final Makefile; ``make`` runs the generated build.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from genmf import PACKAGE_NAME, __version__
from genmf.config import Settings
from genmf.core.aggregate import build_replacements
from genmf.core.executor import run_command
from genmf.core.include_context import annotate_missing_includes
from genmf.core.preproc import (
    preproc_replacements,
    split_preproc_flags,
    sub_make_args,
)
from genmf.core.serial import serial_make_args
from genmf.core.template import render_template
from genmf.errors import GenmfError
from genmf.invocation import Invocation, parse_invocation
from genmf.io.schema import StepKey, StepRecord
from genmf.io.store import FileSidecarStore, SidecarStore
from genmf.io.writer import (
    makefile_output_path,
    preproc_makefile_path,
    write_makefile,
)
from genmf.log import configure_logging
from genmf.policy.profile import MakefileProfile
from genmf.policy.recipe import Recipe

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class RecipeContext:
    """Everything a recipe handler needs for one invocation."""

    def __init__(
        self,
        inv: Invocation,
        settings: Settings | None = None,
        store: SidecarStore | None = None,
        profile: MakefileProfile | None = None,
    ):
        self.inv = inv
        self.settings = settings or Settings()
        self.profile = profile or MakefileProfile.arduino()
        self.store = store or FileSidecarStore(inv.build_path, self.profile)


Handler = Callable[[RecipeContext, Recipe], int]


# ── Step recording ───────────────────────────────────────────────────────────

def record_step(ctx: RecipeContext, recipe: Recipe) -> int:
    """Persist one compile/archive/link step, stamped with the current stage."""
    inv = ctx.inv
    record = StepRecord(
        stage=inv.stage,
        recipe=recipe.value,
        source=inv.source,
        target=inv.target,
        flags=list(inv.flags),
        build_path=inv.build_path,
        core_path=inv.core_path,
        system_path=inv.system_path,
        variant_path=inv.variant_path,
        project_name=inv.project_name,
        archive_file=inv.archive_file,
        serial_port=inv.serial_port,
    )

    stage = ctx.store.read_stage()
    if stage is not None:
        record.stage = stage

    name = ctx.store.put(StepKey.for_record(record), record)
    logger.debug("stage=%s recipe=%s -> %s", record.stage, recipe.value, name)
    return EXIT_OK


def set_stage(ctx: RecipeContext, recipe: Recipe) -> int:
    ctx.store.write_stage(ctx.inv.stage)
    logger.debug("stage set to %r", ctx.inv.stage)
    return EXIT_OK


# ── Small recipes ────────────────────────────────────────────────────────────

def echo(ctx: RecipeContext, recipe: Recipe) -> int:
    print(" ".join(ctx.inv.flags))
    return EXIT_OK


def project_c_file(build_path: str, project_name: str) -> Path:
    """``sketch.ino`` / ``sketch.pde`` -> ``<build>/sketch.c``"""
    name = project_name
    for suffix in (".ino", ".pde"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    return Path(build_path) / (name + ".c")


def generate_project_c(ctx: RecipeContext, recipe: Recipe) -> int:
    """Make sure an (empty) C file named after the project exists."""
    path = project_c_file(ctx.inv.build_path, ctx.inv.project_name)
    if not path.exists():
        path.touch()
        logger.debug("created %s", path)
    return EXIT_OK


# ── make ─────────────────────────────────────────────────────────────────────

def make_jobs(processnum: Optional[int]) -> int:
    if processnum is not None and processnum >= 0:
        return processnum
    env_count = os.environ.get("NUMBER_OF_PROCESSORS", "")
    if env_count.isdigit():
        return int(env_count)
    return os.cpu_count() or 4


def run_make(ctx: RecipeContext, recipe: Recipe) -> int:
    """Run the generated build with the IDE's flags; propagate its status."""
    inv = ctx.inv
    makeflags = os.environ.get("MAKEFLAGS", "")
    extra_env = {"MAKEFLAGS": f"{makeflags} -j{make_jobs(inv.make_processnum)}"}
    if inv.system_path:
        extra_env["ZEPHYR_BASE"] = os.path.join(inv.system_path, "zephyr")

    args = serial_make_args(inv.serial_port) + list(inv.flags)
    result = run_command(
        inv.make_command,
        args,
        search_paths=inv.search_paths,
        locale=ctx.settings.locale,
        extra_env=extra_env,
    )
    return result.returncode


# ── Preprocessing ────────────────────────────────────────────────────────────

def run_preproc(ctx: RecipeContext, recipe: Recipe) -> int:
    """
    Render the preprocessing Makefile and run ``make <recipe>`` on it.

    The pass's replacements are merged into the preprocessing slot so
    the final ``makefile`` recipe sees them too.  On failure the
    compiler's stderr is echoed with missing-include context.
    """
    inv = ctx.inv
    groups = split_preproc_flags(inv.flags)

    replacements = preproc_replacements(
        recipe,
        system_path=inv.system_path,
        variant_path=inv.variant_path,
        source=inv.source,
        target=inv.target,
        compiler_flags=groups.compiler_flags,
        base=ctx.store.read_replacements(),
        profile=ctx.profile,
    )
    ctx.store.write_replacements(replacements)

    template = Path(inv.template)
    text = render_template(template, replacements)
    write_makefile(
        preproc_makefile_path(template, Path(inv.build_path), inv.makefile, ctx.profile),
        text,
    )

    result = run_command(
        inv.make_command,
        sub_make_args(inv.build_path, recipe, groups.make_args),
        search_paths=inv.search_paths,
        locale=ctx.settings.locale,
        capture=True,
    )
    if result.returncode != 0:
        logger.info("%s failed with status %d", recipe.value, result.returncode)

    for line in result.stdout.splitlines():
        logger.debug("%s", line)
    annotate_missing_includes(result.stderr.splitlines())

    return result.returncode


# ── Aggregation ──────────────────────────────────────────────────────────────

def generate_makefile(ctx: RecipeContext, recipe: Recipe) -> int:
    """Fold every recorded step into the final Makefile, then clean up."""
    inv = ctx.inv
    store = ctx.store

    names = store.list()
    records: List[StepRecord] = []
    for name in names:
        record = store.get(name)
        if record is not None:
            records.append(record)
    logger.debug("aggregating %d sidecars", len(records))

    replacements = build_replacements(
        records,
        build_root=inv.build_path,
        core_root=inv.core_path,
        variant_root=inv.variant_path,
        variant_name=inv.variant_name,
        platform_version=inv.platform_version,
        base=store.read_replacements(),
        profile=ctx.profile,
    )

    template = Path(inv.template)
    text = render_template(template, replacements)
    write_makefile(
        makefile_output_path(template, Path(inv.build_path), inv.makefile, ctx.profile),
        text,
    )

    if inv.verbose < ctx.settings.keep_intermediates_level:
        for name in names:
            store.delete(name)
        store.clear_slots()
    else:
        logger.info("keeping %d sidecars in %s", len(names), inv.build_path)
    return EXIT_OK


# ── Dispatch ─────────────────────────────────────────────────────────────────

HANDLERS: Dict[Recipe, Handler] = {
    Recipe.CPP_O: record_step,
    Recipe.C_O: record_step,
    Recipe.S_O: record_step,
    Recipe.AR: record_step,
    Recipe.LD: record_step,
    Recipe.STAGE: set_stage,
    Recipe.ECHO: echo,
    Recipe.GENPRJC: generate_project_c,
    Recipe.MAKE: run_make,
    Recipe.PREPROC_INCLUDES: run_preproc,
    Recipe.PREPROC_MACROS: run_preproc,
    Recipe.MAKEFILE: generate_makefile,
}


def run_recipe(
    inv: Invocation,
    settings: Settings | None = None,
    store: SidecarStore | None = None,
) -> int:
    """Run the recipe named by *inv*; returns the process exit status."""
    recipe = Recipe.parse(inv.recipe)
    if recipe is None:
        logger.warning("unknown recipe %r, nothing to do", inv.recipe)
        return EXIT_OK

    ctx = RecipeContext(inv, settings=settings, store=store)
    return HANDLERS[recipe](ctx, recipe)


# ── CLI ──────────────────────────────────────────────────────────────────────

def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for genmf."""
    if argv is None:
        argv = sys.argv[1:]

    settings = Settings()
    inv = parse_invocation(argv, settings)
    if inv.recipe in (Recipe.PREPROC_INCLUDES.value, Recipe.PREPROC_MACROS.value):
        # Compiler diagnostics are the only stderr output of a preprocessing pass
        inv.verbose = 0
    configure_logging(inv.verbose, settings)

    if inv.show_version:
        print(f"{PACKAGE_NAME} {__version__}")
        return EXIT_OK

    logger.debug("recipe:%s stage:%s target:%s source:%s",
                 inv.recipe, inv.stage, inv.target, inv.source)
    try:
        return run_recipe(inv, settings)
    except (GenmfError, OSError) as exc:
        logger.error("%s: %s", inv.recipe or PACKAGE_NAME, exc)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
