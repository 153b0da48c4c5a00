from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Literal, Any

# Decoded provider JSON (dict or list); only orchestrator.extraction knows its shapes
RawInferenceResult = Any

FailureClass = Literal["permission", "generic"]

@dataclass(frozen=True)
class DetectionRecord:
    label: Optional[str]       # e.g. "walnut" | "almond"; None if the record carried no label
    confidence: float = 0.0

@dataclass(frozen=True)
class TallyRow:
    timestamp: str             # ISO-8601, taken when the row is built
    submission_id: Optional[str]
    counts: tuple[tuple[str, int], ...]   # vocabulary order
    total: int                 # every detection, in or out of the vocabulary

    @property
    def class_counts(self) -> dict[str, int]:
        return dict(self.counts)

    def as_list(self) -> list:
        return [self.timestamp, self.submission_id, *(n for _, n in self.counts), self.total]

    def __len__(self) -> int:
        return 3 + len(self.counts)

class OutcomeKind(str, Enum):
    SUCCESS = "success"
    MISSING_CREDENTIAL = "missing_credential"
    WRITE_FAILURE = "write_failure"

@dataclass(frozen=True)
class PersistenceOutcome:
    kind: OutcomeKind
    status: str                # shown to the caller as-is
    failure_class: Optional[FailureClass] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

@dataclass(frozen=True)
class TallyResult:
    row: TallyRow
    outcome: PersistenceOutcome
    diagnostics: tuple[str, ...] = field(default_factory=tuple)
