"""
Profile descriptor for Makefile generation.

Frozen dataclass with the token names, slot names and file suffixes the
templates and the IDE agree on.  Use ``MakefileProfile.arduino()``.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MakefileProfile:
    """Names shared between the recorder, the templates and the IDE."""

    profile_id: str
    token_prefix: str = "ARDUINO"
    template_suffix: str = ".template"
    sidecar_suffix: str = ".genmf"
    stage_slot: str = "genmf.stage"
    preproc_slot: str = "genmf.preproc"

    def token(self, name: str) -> str:
        """Full token name, e.g. ``token("CFLAGS") -> "ARDUINO_CFLAGS"``."""
        return f"{self.token_prefix}_{name}"

    @classmethod
    def arduino(cls) -> MakefileProfile:
        """The profile used by the Arduino IDE platform definitions."""
        return cls(profile_id="arduino-makefile")
