from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Status(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"


def status_rank(s: Status) -> int:
    order = {Status.OK: 0, Status.WARNING: 1, Status.ERROR: 2}
    return order[s]


@dataclass(frozen=True)
class CheckTarget:
    relative_path: str
    marker: str
    critical: bool = True
    description: str = ""

    def url(self, base_url: str) -> str:
        # Appended verbatim; the base keeps its own path (e.g. /matomo/)
        return base_url.rstrip("/") + "/" + self.relative_path.lstrip("/")


@dataclass
class FetchResult:
    url: str
    status_code: Optional[int]
    headers: Dict[str, str]
    body: Optional[bytes]
    error: Optional[str]
    retryable: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300


@dataclass(frozen=True)
class CheckOutcome:
    path: str
    status: Status
    message: str
    http_status: Optional[int] = None
    critical: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "status": self.status.value,
            "message": self.message,
            "http_status": self.http_status,
        }


@dataclass
class CheckReport:
    label: str
    outcomes: List[CheckOutcome] = field(default_factory=list)
    long_error_message: Optional[str] = None

    @property
    def status(self) -> Status:
        if not self.outcomes:
            return Status.OK
        return max((o.status for o in self.outcomes), key=status_rank)

    @property
    def has_critical(self) -> bool:
        return any(o.critical and o.status == Status.ERROR for o in self.outcomes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "status": self.status.value,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "long_error_message": self.long_error_message,
        }
