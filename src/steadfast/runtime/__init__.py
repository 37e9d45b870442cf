"""Runtime bootstrap exports."""

from .logging import LogSettings, bootstrap_logging

__all__ = ["LogSettings", "bootstrap_logging"]
