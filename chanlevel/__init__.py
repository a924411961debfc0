from typing import TYPE_CHECKING, Any

from .pipeline import Completed, Dropped, Failed, FailureReason, Outcome, process_payload

__all__ = [
    "__version__",
    "Completed",
    "Dropped",
    "Failed",
    "FailureReason",
    "Outcome",
    "create_app",
    "process_payload",
]

__version__ = "0.1.0"

if TYPE_CHECKING:
    from fastapi import FastAPI


# Lazy import to avoid requiring FastAPI for codec-only usage
def create_app(*args: Any, **kwargs: Any) -> "FastAPI":
    from .app import create_app as _create_app

    return _create_app(*args, **kwargs)
