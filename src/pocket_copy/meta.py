# src/pocket_copy/meta.py

"""Centralized program identity constants for Pocket Copy."""

_BASE = "pocket-copy"

# Distribution name (pip install ...)
PROGRAM_SCRIPT = _BASE

# Human-readable name for log banners and error messages
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name (also the logger name)
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for POCKET_COPY_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline
DESCRIPTION = "Pattern-driven incremental file copying for build pipelines."
