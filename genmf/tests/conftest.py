"""
Test fixtures for genmf.

Provides a build root with a realistic set of recorded steps, sample
templates and compiler diagnostics.
"""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import List

import pytest

from genmf.io.schema import StepRecord


# ── Sample templates ─────────────────────────────────────────────────────────

MAKEFILE_TEMPLATE = textwrap.dedent("""\
    # generated for ###<<<ARDUINO_PROJECT_NAME>>>###
    PROJECT = ###<<<ARDUINO_PROJECT_NAME>>>###
    BUILD = ###<<<ARDUINO_BUILD_PATH>>>###
    CFLAGS += ###<<<ARDUINO_CFLAGS>>>###
    CORE_SRCS = \\
    ###<<<ARDUINO_CORES_SRCS>>>###
    VARIANT_SRCS = \\
    ###<<<ARDUINO_VARIANT_SRCS>>>###
    LIB_SRCS = \\
    ###<<<ARDUINO_LIBRARIES_SRCS>>>###
    SKETCH_SRCS = \\
    ###<<<ARDUINO_SKETCH_SRCS>>>###
    INCLUDES = ###<<<ARDUINO_PREPROC_INCLUDES_FLAGS>>>###
    LATER = ###<<<NOT_YET_KNOWN>>>###

    all:
    \t@echo done
""")

PREPROC_TEMPLATE = textwrap.dedent("""\
    SYSTEM = ###<<<ARDUINO_SYSTEM_PATH>>>###
    preproc.includes:
    ###<<<ARDUINO_PREPROC_INCLUDES_FLAGS>>>###
    ###<<<ARDUINO_PREPROC_INCLUDES_SOURCE>>>###
    ###<<<ARDUINO_PREPROC_INCLUDES_OUTFILE>>>###
""")

# ── Sample compiler output ───────────────────────────────────────────────────

def missing_include_stderr(source: Path) -> str:
    return textwrap.dedent(f"""\
        In file included from somewhere:
        {source}:2:10: fatal error: missing.h: No such file or directory
        compilation terminated.
    """)


# ── Record factories ─────────────────────────────────────────────────────────

BUILD = "/build"
CORE = "/pkg/cores/arduino"
VARIANT = "/pkg/variants/board"


def make_record(**kw) -> StepRecord:
    fields = dict(
        stage="sketch",
        recipe="c.o",
        source=f"{BUILD}/sketch/a.c",
        target=f"{BUILD}/sketch/a.c.o",
        flags=[],
        build_path=BUILD,
        core_path=CORE,
        system_path="/pkg/system",
        variant_path=VARIANT,
        project_name="blink.ino",
        archive_file="core.a",
        serial_port="",
    )
    fields.update(kw)
    return StepRecord(**fields)


@pytest.fixture
def sample_records() -> List[StepRecord]:
    """One record per source group plus an archive and a link step."""
    return [
        make_record(stage="core", recipe="c.o", source=f"{CORE}/wiring.c",
                    target=f"{BUILD}/core/wiring.c.o"),
        make_record(stage="core", recipe="cpp.o", source=f"{VARIANT}/variant.cpp",
                    target=f"{BUILD}/core/variant.cpp.o"),
        make_record(stage="libraries", recipe="cpp.o", source="/libs/Servo/Servo.cpp",
                    target=f"{BUILD}/libraries/Servo.cpp.o"),
        make_record(stage="sketch", recipe="cpp.o", source=f"{BUILD}/sketch/blink.ino.cpp",
                    target=f"{BUILD}/sketch/blink.ino.cpp.o",
                    flags=["-DX", "-I/pkg/include"]),
        make_record(stage="sketch", recipe="S.o", source=f"{BUILD}/sketch/startup.S",
                    target=f"{BUILD}/sketch/startup.S.o",
                    flags=["-I/pkg/include", "-DY"]),
        make_record(stage="core", recipe="ar", source=f"{BUILD}/core/wiring.c.o",
                    target=f"{BUILD}/core/core.a"),
        make_record(stage="sketch", recipe="ld", source="",
                    target=f"{BUILD}/blink.ino.elf"),
    ]


@pytest.fixture(autouse=True)
def _quiet_settings(monkeypatch):
    """Keep tests off syslog and independent of the caller's environment."""
    monkeypatch.setenv("GENMF_SYSLOG", "false")
    for var in ("GENMF_VERBOSE", "GENMF_MAKE_COMMAND",
                "GENMF_KEEP_INTERMEDIATES_LEVEL", "GENMF_LOCALE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    root = tmp_path / "build"
    root.mkdir()
    return root


@pytest.fixture
def makefile_template(tmp_path: Path) -> Path:
    p = tmp_path / "Makefile.template"
    p.write_text(MAKEFILE_TEMPLATE)
    return p


@pytest.fixture
def preproc_template(tmp_path: Path) -> Path:
    p = tmp_path / "Makefile.preproc.template"
    p.write_text(PREPROC_TEMPLATE)
    return p
