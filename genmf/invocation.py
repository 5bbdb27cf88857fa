"""
Invocation — the parameters of one genmf call.

The IDE passes single-dash options named after its platform.txt
properties (``-build.path``, ``-recipe`` ...).  Compiler flags follow
``--``; anything unrecognized before ``--`` is passed through as well.
"""
from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from genmf.config import Settings
from genmf.core.executor import SearchPaths

_UNSET = -1


@dataclass
class Invocation:
    recipe: str = ""
    stage: str = ""
    source: str = ""
    target: str = ""
    flags: List[str] = field(default_factory=list)

    build_path: str = ""
    core_path: str = ""
    system_path: str = ""
    variant_path: str = ""
    platform_path: str = ""
    variant_name: str = ""
    project_name: str = ""
    archive_file: str = ""
    serial_port: str = ""
    platform_version: str = ""

    template: str = ""
    makefile: str = ""

    cmds_path: str = ""
    compiler_path: str = ""
    uploader_path: str = ""
    make_command: str = "make"
    make_processnum: Optional[int] = None

    verbose: int = 3
    show_version: bool = False

    @property
    def search_paths(self) -> SearchPaths:
        return SearchPaths(
            cmds_path=self.cmds_path,
            compiler_path=self.compiler_path,
            uploader_path=self.uploader_path,
        )


# (option, dest, help)
_STRING_OPTIONS = [
    ("-build.path", "build_path", "build directory"),
    ("-build.core.path", "core_path", "platform core sources"),
    ("-build.system.path", "system_path", "platform system directory"),
    ("-build.variant.path", "variant_path", "board variant sources"),
    ("-runtime.platform.path", "platform_path", "platform root"),
    ("-build.variant", "variant_name", "board variant name"),
    ("-project_name", "project_name", "sketch project name"),
    ("-archive_file", "archive_file", "core archive file name"),
    ("-serial.port", "serial_port", "upload serial port"),
    ("-recipe", "recipe", "recipe to run"),
    ("-stage", "stage", "build stage"),
    ("-target", "target", "target file"),
    ("-source", "source", "source file"),
    ("-template", "template", "Makefile template"),
    ("-makefile", "makefile", "generated Makefile name"),
    ("-build.usr.bin.path", "cmds_path", "auxiliary commands directory"),
    ("-build.compiler.path", "compiler_path", "compiler directory"),
    ("-build.uploader.path", "uploader_path", "uploader directory"),
    ("-platform.version", "platform_version", "platform version"),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genmf",
        description="genmf — record IDE build steps and generate a Makefile",
        allow_abbrev=False,
    )
    for option, dest, help_text in _STRING_OPTIONS:
        parser.add_argument(option, dest=dest, default="", help=help_text)
    parser.add_argument("-make.command", dest="make_command", default=None,
                        help="make executable")
    parser.add_argument("-make.processnum", dest="make_processnum", type=int,
                        default=None, help="parallel make jobs")
    parser.add_argument("-verbose", dest="verbose", type=int, default=_UNSET,
                        help="verbosity level")
    parser.add_argument("-w", dest="woff", action="store_true", help="quiet (verbosity 0)")
    parser.add_argument("-Wall", dest="wall", action="store_true", help="verbosity 5")
    parser.add_argument("-Wextra", dest="wextra", action="store_true", help="verbosity 9")
    parser.add_argument("-version", dest="show_version", action="store_true",
                        help="show program version")
    return parser


def resolve_verbosity(ns: argparse.Namespace, default: int) -> int:
    if ns.verbose != _UNSET:
        return ns.verbose
    if ns.wextra:
        return 9
    if ns.wall:
        return 5
    if ns.woff:
        return 0
    return default


def parse_invocation(
    argv: Sequence[str],
    settings: Settings | None = None,
) -> Invocation:
    if settings is None:
        settings = Settings()

    argv = list(argv)
    passthrough: List[str] = []
    if "--" in argv:
        idx = argv.index("--")
        argv, passthrough = argv[:idx], argv[idx + 1:]

    ns, extra = build_parser().parse_known_args(argv)

    return Invocation(
        recipe=ns.recipe,
        stage=ns.stage,
        source=ns.source,
        target=ns.target,
        flags=extra + passthrough,
        build_path=ns.build_path,
        core_path=ns.core_path,
        system_path=ns.system_path,
        variant_path=ns.variant_path,
        platform_path=ns.platform_path,
        variant_name=ns.variant_name,
        project_name=ns.project_name,
        archive_file=ns.archive_file,
        serial_port=ns.serial_port,
        platform_version=ns.platform_version,
        template=ns.template,
        makefile=ns.makefile,
        cmds_path=ns.cmds_path,
        compiler_path=ns.compiler_path,
        uploader_path=ns.uploader_path,
        make_command=ns.make_command or settings.make_command,
        make_processnum=ns.make_processnum,
        verbose=resolve_verbosity(ns, settings.verbose),
        show_version=ns.show_version,
    )
