"""Exception hierarchy for genmf."""
from __future__ import annotations


class GenmfError(Exception):
    """Base class for every error genmf reports itself."""


class PreconditionError(GenmfError):
    """The recorded build state cannot support the requested recipe."""


class MissingLinkStepError(PreconditionError):
    def __init__(self, build_root: str):
        super().__init__(
            f"missing link step: no 'ld' sidecar recorded under {build_root}"
        )
        self.build_root = build_root


class TemplateError(GenmfError):
    """The Makefile template could not be read."""

    def __init__(self, template: str, cause: OSError):
        super().__init__(f"cannot read template {template}: {cause}")
        self.template = template
        self.cause = cause


class UnsupportedPlatformError(GenmfError):
    """A child process ended without a conventional exit status."""


class InvalidRecipeError(GenmfError, ValueError):
    """A recipe that does not describe a build step was given a sidecar."""
