"""
genmf — build-step recorder and Makefile generator for IDE-driven builds.

The IDE invokes ``genmf`` once per compiled file, once per archive/link
step and once at the end; each step is recorded as a ``.genmf`` sidecar
in the build root and the final ``makefile`` recipe folds them into a
Makefile rendered from a template.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "genmf"
SCHEMA_VERSION = "0.1"
