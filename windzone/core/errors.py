"""
Error taxonomy for the wind pressure engine.
"""

from typing import Any, Dict, Optional


class WindZoneError(Exception):
    """Base exception for wind pressure engine errors.

    Attributes:
        message: Error description
        detail: Optional structured context (offending field, value, ...)
    """

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def __str__(self) -> str:
        if not self.detail:
            return self.message
        context = ", ".join(f"{key}={value!r}" for key, value in self.detail.items())
        return f"{self.message} ({context})"


class ValidationError(WindZoneError, ValueError):
    """Raised when geometry or wind parameters are invalid.

    Inputs are rejected before any computation, never clamped.
    """
    pass


class LookupMiss(WindZoneError):
    """No exact coefficient row for the requested effective area.

    Non-fatal: the resolver records it as a low-confidence warning.
    """
    pass


class ComputationError(WindZoneError):
    """Unexpected numeric failure (e.g. a zone with zero or negative area)."""
    pass


class CacheIntegrityError(WindZoneError):
    """Cached payload no longer matches its stored checksum."""
    pass


class WorkflowError(WindZoneError):
    """The asynchronous calculation raised; always recoverable via RETRY."""
    pass
