from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


class ErrorCode:
    CONFIG_ERROR = "config_error"
    VALIDATION_ERROR = "validation_error"


@dataclass(eq=False)
class PlatformError(Exception):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_json(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
        }


class CatalogError(PlatformError):
    """Policy catalog is missing, malformed, or fails integrity checks."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CONFIG_ERROR, message, details)


class InputValidationError(PlatformError):
    """A collaborator payload does not match the evaluation input contract."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, details)
