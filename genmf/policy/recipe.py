"""
Recipe and stage vocabulary.

A recipe names the operation one invocation performs.  Only the five
compile/archive/link recipes describe a build step and produce a
sidecar; the rest act on the sidecars or on the build itself.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class Recipe(str, Enum):
    CPP_O = "cpp.o"
    C_O = "c.o"
    S_O = "S.o"
    AR = "ar"
    LD = "ld"
    STAGE = "stage"
    ECHO = "echo"
    GENPRJC = "genprjc"
    MAKE = "make"
    PREPROC_INCLUDES = "preproc.includes"
    PREPROC_MACROS = "preproc.macros"
    MAKEFILE = "makefile"

    @property
    def records_step(self) -> bool:
        """True for recipes persisted as a step sidecar."""
        return self in _STEP_RECIPES

    @classmethod
    def parse(cls, name: str) -> Optional[Recipe]:
        """Return the member for *name*, or None for an unknown recipe."""
        try:
            return cls(name)
        except ValueError:
            return None


_STEP_RECIPES = frozenset({
    Recipe.CPP_O, Recipe.C_O, Recipe.S_O, Recipe.AR, Recipe.LD,
})


class Stage(str, Enum):
    """Stage tags the IDE stamps onto its compile steps."""
    CORE = "core"
    LIBRARIES = "libraries"
    SKETCH = "sketch"
