"""Base exception shared by every stamping failure."""

from __future__ import annotations


class StamperError(RuntimeError):
    """Base class for errors raised while stamping a template."""
