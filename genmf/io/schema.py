"""
Schema — the step record persisted in each ``.genmf`` sidecar.

Every field has a zero-value default so that sidecars written by older
or newer releases still decode: unknown keys are ignored and missing or
ill-typed keys fall back to their defaults (see ``StepRecord.salvage``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from genmf.policy.recipe import Recipe

logger = logging.getLogger(__name__)


class StepRecord(BaseModel):
    """One compile, archive or link step as the IDE described it."""
    stage: str = ""
    recipe: str = ""
    source: str = ""
    target: str = ""
    flags: List[str] = Field(default_factory=list)

    build_path: str = ""
    core_path: str = ""
    system_path: str = ""
    variant_path: str = ""
    project_name: str = ""
    archive_file: str = ""
    serial_port: str = ""

    @property
    def is_compile(self) -> bool:
        return self.recipe.endswith(".o")

    @classmethod
    def salvage(cls, data: Any) -> StepRecord:
        """
        Build a record from decoded JSON, dropping fields that fail
        validation instead of rejecting the whole record.
        """
        if not isinstance(data, dict):
            return cls()
        fields: Dict[str, Any] = {
            k: v for k, v in data.items() if k in cls.model_fields
        }
        while True:
            try:
                return cls.model_validate(fields)
            except ValidationError as exc:
                bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
                bad &= fields.keys()
                if not bad:
                    return cls()
                logger.warning("dropping malformed sidecar fields: %s",
                               ", ".join(sorted(str(b) for b in bad)))
                for name in bad:
                    del fields[name]


@dataclass(frozen=True)
class StepKey:
    """
    Identity of a step sidecar: target, recipe and, for archive steps,
    the member source.

    Two steps share a sidecar only when they agree on all three, which
    is a re-invocation of the same step; the later write wins.
    """
    target: str
    recipe: str
    source: Optional[str] = None

    @classmethod
    def for_record(cls, record: StepRecord) -> StepKey:
        source = record.source if record.recipe == Recipe.AR.value else None
        return cls(target=record.target, recipe=record.recipe, source=source)

    def sidecar_name(self, build_root: str, suffix: str = ".genmf") -> str:
        """
        ``<escaped target>[_<escaped source>].<recipe><suffix>``

        The build root prefix is stripped from target and source, then
        path separators and drive colons become underscores.
        """
        name = _escape(_strip_prefix(self.target, build_root))
        if self.source is not None:
            name += "_" + _escape(_strip_prefix(self.source, build_root))
        return f"{name}.{self.recipe}{suffix}"


def _strip_prefix(path: str, prefix: str) -> str:
    if prefix and path.startswith(prefix):
        return path[len(prefix):]
    return path


def _escape(path: str) -> str:
    for ch in ("\\", "/", ":"):
        path = path.replace(ch, "_")
    return path
