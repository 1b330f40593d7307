"""
Typed errors for score_scanner

Every error carries a category so callers can tell a caller bug
(contract violation) from a recoverable collaborator failure or a
pipeline that was started before its resources were ready.
Cancellation is a terminal pipeline state, not an error.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error categories"""

    CONTRACT = "contract"
    ENCODING = "encoding"
    COLLABORATOR = "collaborator"
    NOT_READY = "not_ready"


@dataclass
class ScannerError(Exception):
    """Base error for all score_scanner errors"""

    category: ErrorCategory = ErrorCategory.CONTRACT
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary (used for JSON output)"""
        result = {
            "category": self.category.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ContractViolation(ScannerError, ValueError):
    """Malformed input to a pure function. Always a caller bug."""

    category: ErrorCategory = field(default=ErrorCategory.CONTRACT)
    field_name: Optional[str] = None
    value: Any = None

    def __post_init__(self):
        if self.field_name:
            self.details["field"] = self.field_name
            self.details["value"] = repr(self.value)


@dataclass
class EncodingError(ContractViolation):
    """A sequence that cannot be written as a MIDI file as-is"""

    category: ErrorCategory = field(default=ErrorCategory.ENCODING)
    event_index: Optional[int] = None

    def __post_init__(self):
        super().__post_init__()
        if self.event_index is not None:
            self.details["event_index"] = self.event_index


@dataclass
class CollaboratorFailure(ScannerError):
    """The inference collaborator raised while handling one batch"""

    category: ErrorCategory = field(default=ErrorCategory.COLLABORATOR)
    batch_index: Optional[int] = None

    def __post_init__(self):
        if self.batch_index is not None:
            self.details["batch_index"] = self.batch_index


@dataclass
class NotReadyError(ScannerError):
    """Pipeline run started before the inference backend was available"""

    category: ErrorCategory = field(default=ErrorCategory.NOT_READY)


def require(condition: bool, message: str, field_name: Optional[str] = None, value: Any = None) -> None:
    """Raise ContractViolation unless condition holds."""
    if not condition:
        raise ContractViolation(message=message, field_name=field_name, value=value)
