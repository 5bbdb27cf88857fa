"""
Sidecar store — durable state shared by independent genmf invocations.

Each build step lives in its own ``*.genmf`` sidecar.  Two single-value
slots sit beside them: the current stage (a bare JSON string) and the
preprocessing replacement map (a flat JSON object).

Writers are assumed to be serialized by the IDE: distinct steps never
share a sidecar, and the two slots are last-writer-wins with no locking.
The ``makefile`` recipe must only run once every step invocation has
finished.

Absence is never an error: ``get`` and the slot readers return None
when nothing was recorded.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from genmf.errors import InvalidRecipeError
from genmf.io.schema import StepKey, StepRecord
from genmf.policy.profile import MakefileProfile
from genmf.policy.recipe import Recipe

logger = logging.getLogger(__name__)


class SidecarStore:
    """
    Step and slot persistence over a flat namespace of names.

    Subclasses provide raw text access; encoding, permissive decoding and
    slot handling live here.
    """

    def __init__(self, build_root: str, profile: MakefileProfile | None = None):
        self.build_root = build_root
        self.profile = profile or MakefileProfile.arduino()

    # ── Raw access (subclass contract) ───────────────────────────────────

    def _read_text(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def _write_text(self, name: str, text: str) -> None:
        raise NotImplementedError

    def _remove(self, name: str) -> None:
        raise NotImplementedError

    def _names(self) -> List[str]:
        raise NotImplementedError

    # ── Step sidecars ────────────────────────────────────────────────────

    def key_name(self, key: StepKey) -> str:
        return key.sidecar_name(self.build_root, self.profile.sidecar_suffix)

    def put(self, key: StepKey, record: StepRecord) -> str:
        """Persist *record* under *key*; returns the sidecar name."""
        recipe = Recipe.parse(key.recipe)
        if recipe is None or not recipe.records_step:
            raise InvalidRecipeError(
                f"recipe {key.recipe!r} does not record a build step"
            )
        name = self.key_name(key)
        self._write_text(name, _encode(record.model_dump(mode="json")))
        logger.debug("recorded %s", name)
        return name

    def get(self, name: str) -> Optional[StepRecord]:
        """Decode the sidecar *name*; None if it does not exist."""
        text = self._read_text(name)
        if text is None:
            return None
        return StepRecord.salvage(_decode(text, name))

    def list(self) -> List[str]:
        """Names of all step sidecars, sorted."""
        suffix = self.profile.sidecar_suffix
        return sorted(n for n in self._names() if n.endswith(suffix))

    def delete(self, name: str) -> None:
        """Remove a sidecar or slot; a missing one is ignored."""
        self._remove(name)

    # ── Stage slot ───────────────────────────────────────────────────────

    def read_stage(self) -> Optional[str]:
        text = self._read_text(self.profile.stage_slot)
        if text is None:
            return None
        value = _decode(text, self.profile.stage_slot)
        if not isinstance(value, str):
            logger.warning("ignoring malformed stage slot: %r", value)
            return None
        return value

    def write_stage(self, stage: str) -> None:
        self._write_text(self.profile.stage_slot, _encode(stage))

    # ── Preprocessing replacement-map slot ───────────────────────────────

    def read_replacements(self) -> Optional[Dict[str, str]]:
        text = self._read_text(self.profile.preproc_slot)
        if text is None:
            return None
        value = _decode(text, self.profile.preproc_slot)
        if not isinstance(value, dict):
            logger.warning("ignoring malformed replacement slot")
            return {}
        return {k: v for k, v in value.items() if isinstance(v, str)}

    def write_replacements(self, replacements: Dict[str, str]) -> None:
        self._write_text(self.profile.preproc_slot, _encode(replacements))

    def clear_slots(self) -> None:
        self._remove(self.profile.stage_slot)
        self._remove(self.profile.preproc_slot)


class FileSidecarStore(SidecarStore):
    """Sidecars as files directly under the build root."""

    @property
    def root(self) -> Path:
        return Path(self.build_root)

    def path(self, name: str) -> Path:
        return self.root / name

    def _read_text(self, name: str) -> Optional[str]:
        try:
            return self.path(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            logger.warning("undecodable sidecar %s: %s", name, exc)
            return ""

    def _write_text(self, name: str, text: str) -> None:
        write_text_replace(self.path(name), text)

    def _remove(self, name: str) -> None:
        try:
            self.path(name).unlink()
        except FileNotFoundError:
            pass

    def _names(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return [p.name for p in self.root.iterdir() if p.is_file()]


class MemorySidecarStore(SidecarStore):
    """In-memory store; same encoding as the file store."""

    def __init__(self, build_root: str = "", profile: MakefileProfile | None = None):
        super().__init__(build_root, profile)
        self.files: Dict[str, str] = {}

    def _read_text(self, name: str) -> Optional[str]:
        return self.files.get(name)

    def _write_text(self, name: str, text: str) -> None:
        self.files[name] = text

    def _remove(self, name: str) -> None:
        self.files.pop(name, None)

    def _names(self) -> List[str]:
        return list(self.files)


# ── Helpers ──────────────────────────────────────────────────────────────────

def write_text_replace(path: Path, text: str) -> None:
    """Write *text* to a temporary file beside *path*, then replace *path*."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def _encode(value) -> str:
    return json.dumps(value, indent=2, sort_keys=True) + "\n"


def _decode(text: str, name: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("malformed sidecar %s: %s", name, exc)
        return None
