"""steadfast - error handling and resilience core.

Classifies failures into a closed taxonomy, retries what is worth retrying
with bounded jittered backoff, and resolves the message shown to the user.
"""

__version__ = "0.1.0"


# Lazy imports to avoid circular dependencies
def __getattr__(name: str):
    """Lazy import module components."""
    if name in ("GlobalPath",):
        from . import core
        return getattr(core, name)
    if name in ("Log",):
        from . import util
        return getattr(util, name)
    if name in ("ConfigManager", "Config", "ConfigError"):
        from .core import config
        return getattr(config, name)
    if name in (
        "ApiError",
        "ErrorCategory",
        "ErrorContext",
        "ErrorHandler",
        "HandlingResult",
        "RetryCancelledError",
        "Severity",
        "create_context",
        "handle_error",
        "with_retry",
    ):
        from . import errors
        return getattr(errors, name)
    if name in ("FaultBoundary", "create_fault_boundary"):
        from . import ui
        return getattr(ui, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Core
    "GlobalPath",
    "Log",
    "Config",
    "ConfigError",
    "ConfigManager",
    # Errors
    "ApiError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorHandler",
    "HandlingResult",
    "RetryCancelledError",
    "Severity",
    "create_context",
    "handle_error",
    "with_retry",
    # UI
    "FaultBoundary",
    "create_fault_boundary",
]
