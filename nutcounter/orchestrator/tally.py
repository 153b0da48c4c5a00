from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

from nutcounter.orchestrator import errors
from nutcounter.orchestrator.contracts import (
    DetectionRecord, OutcomeKind, PersistenceOutcome, RawInferenceResult, TallyRow,
)
from nutcounter.orchestrator.extraction import extract_detections


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def count_labels(records: Iterable[DetectionRecord], vocabulary: Sequence[str]) -> tuple[dict[str, int], int]:
    counts = {label: 0 for label in vocabulary}
    total = 0
    for rec in records:
        total += 1
        if rec.label in counts:
            counts[rec.label] += 1
    return counts, total


def build_row(submission_id, counts: dict[str, int], total: int,
              vocabulary: Sequence[str], clock: Callable[[], datetime] = _utc_now) -> TallyRow:
    return TallyRow(
        timestamp=clock().isoformat(),
        submission_id=submission_id,
        counts=tuple((label, counts.get(label, 0)) for label in vocabulary),
        total=total,
    )


def aggregate(raw: RawInferenceResult, submission_id, vocabulary: Sequence[str],
              clock: Callable[[], datetime] = _utc_now) -> tuple[TallyRow, list[str]]:
    """Extract detections from `raw` and tally them against `vocabulary`.

    Labels outside the vocabulary only count toward the total. A label
    repeated in `vocabulary` gets one column, at its first position.
    """
    vocabulary = tuple(dict.fromkeys(vocabulary))
    records, diagnostics = extract_detections(raw)
    counts, total = count_labels(records, vocabulary)
    outside = total - sum(counts.values())
    if outside:
        diagnostics.append(f"tally: {outside} detection(s) outside vocabulary counted in total only")
    return build_row(submission_id, counts, total, vocabulary, clock=clock), diagnostics


def _truncate(message: str) -> str:
    message = message or "unknown error"
    if len(message) <= errors.REASON_MAX_CHARS:
        return message
    return message[: errors.REASON_MAX_CHARS] + "..."


def persist(row: TallyRow, writer, status_store=None) -> PersistenceOutcome:
    """Best-effort append of `row`. Never raises; the outcome says what happened."""
    def log(msg, level="info"):
        if status_store is not None:
            status_store.log(msg, level=level)

    if writer is None or not writer.configured:
        log("sheet: credentials missing, row not written", level="error")
        return PersistenceOutcome(kind=OutcomeKind.MISSING_CREDENTIAL, status=errors.STATUS_MISSING_KEY)

    try:
        writer.append_row(row.as_list())
    except errors.MissingSheetCredentialError as e:
        log(f"sheet: {e.message}", level="error")
        return PersistenceOutcome(kind=OutcomeKind.MISSING_CREDENTIAL, status=errors.STATUS_MISSING_KEY)
    except errors.SheetWriteError as e:
        reason = _truncate(e.message)
        log(f"sheet: write error (status={e.status_code}): {e.message}", level="error")
        if e.status_code in errors.PERMISSION_STATUS_CODES:
            return PersistenceOutcome(
                kind=OutcomeKind.WRITE_FAILURE, status=errors.STATUS_PERMISSION,
                failure_class="permission", reason=reason,
            )
        return PersistenceOutcome(
            kind=OutcomeKind.WRITE_FAILURE, status=errors.STATUS_WRITE_FAILED.format(reason=reason),
            failure_class="generic", reason=reason,
        )
    except Exception as e:
        reason = _truncate(str(e))
        log(f"sheet: unexpected {type(e).__name__}: {e}", level="error")
        return PersistenceOutcome(
            kind=OutcomeKind.WRITE_FAILURE, status=errors.STATUS_WRITE_FAILED.format(reason=reason),
            failure_class="generic", reason=reason,
        )

    log(f"sheet: appended row for {row.submission_id!r}")
    return PersistenceOutcome(kind=OutcomeKind.SUCCESS, status=errors.STATUS_SUCCESS)
