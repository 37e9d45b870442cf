"""UI-facing helpers."""

from .boundary import FaultBoundary, create_fault_boundary

__all__ = ["FaultBoundary", "create_fault_boundary"]
