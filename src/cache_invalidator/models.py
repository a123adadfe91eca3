"""Invalidation requests, records, diagnostics and aggregated outcomes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional

from identifiers import encode_identifier


class InvalidationStatus(str, Enum):
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    UNKNOWN = "unknown"

    @classmethod
    def from_remote(cls, value: Optional[str]) -> "InvalidationStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class Severity(str, Enum):
    WARNING = "Warning"
    ERROR = "Error"


@dataclass(frozen=True)
class InvalidationRequest:
    """One invalidation to submit: a distribution, its paths, and the wait budget in seconds."""

    target: str
    paths: FrozenSet[str]
    timeout: float

    def __post_init__(self):
        object.__setattr__(self, "paths", frozenset(self.paths))

    @property
    def path_list(self) -> List[str]:
        return sorted(self.paths)


@dataclass
class InvalidationRecord:
    """CloudFront's view of one invalidation on one distribution."""

    target: str
    invalidation_id: str = ""
    status: InvalidationStatus = InvalidationStatus.IN_PROGRESS
    create_time: Optional[datetime] = None

    @classmethod
    def from_remote(cls, target: str, invalidation: Dict[str, Any]) -> "InvalidationRecord":
        """Build a record from the ``Invalidation`` structure CloudFront returns."""
        return cls(
            target=target,
            invalidation_id=invalidation.get("Id") or "",
            status=InvalidationStatus.from_remote(invalidation.get("Status")),
            create_time=invalidation.get("CreateTime"),
        )

    @property
    def is_completed(self) -> bool:
        return self.status is InvalidationStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distribution_id": self.target,
            "invalidation_id": self.invalidation_id,
            "status": self.status.value,
            "create_time": self.create_time.isoformat() if self.create_time else None,
        }


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    summary: str
    detail: str = ""
    target: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
            "distribution_id": self.target,
        }


class Diagnostics(list):
    """Ordered collection of Diagnostic entries."""

    def add_error(self, summary: str, detail: str = "", target: Optional[str] = None) -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail, target))

    def add_warning(self, summary: str, detail: str = "", target: Optional[str] = None) -> None:
        self.append(Diagnostic(Severity.WARNING, summary, detail, target))

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    def errors(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    def warnings(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]


class TargetResult(NamedTuple):
    """What one target's task hands to the collection queue."""

    target: str
    record: Optional[InvalidationRecord]
    diagnostics: Diagnostics


@dataclass
class OutcomeSet:
    """Aggregated result of a fan-out, keyed by distribution id.

    Every requested distribution is a key in ``records``; a value of ``None``
    means no invalidation is known for it (create failed, CloudFront returned
    no identifier, or the invalidation no longer exists).
    """

    records: Dict[str, Optional[InvalidationRecord]] = field(default_factory=dict)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def __getitem__(self, target: str) -> Optional[InvalidationRecord]:
        return self.records[target]

    def __contains__(self, target: object) -> bool:
        return target in self.records

    def __len__(self) -> int:
        return len(self.records)

    def targets(self) -> List[str]:
        return list(self.records)

    def statuses(self) -> Dict[str, str]:
        return {
            target: (record.status.value if record else InvalidationStatus.UNKNOWN.value)
            for target, record in self.records.items()
        }

    def invalidation_ids(self) -> Dict[str, str]:
        return {target: (record.invalidation_id if record else "") for target, record in self.records.items()}

    def identifier(self) -> str:
        return encode_identifier(self.invalidation_ids())

    def absent_targets(self) -> List[str]:
        return [target for target, record in self.records.items() if record is None]

    def has_error(self) -> bool:
        return self.diagnostics.has_error()

    def diagnostics_for(self, target: str) -> Diagnostics:
        return Diagnostics(d for d in self.diagnostics if d.target == target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identifier(),
            "statuses": self.statuses(),
            "absent": self.absent_targets(),
            "invalidations": {target: record.to_dict() for target, record in self.records.items() if record},
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
