"""
Find the prediction list inside a provider payload.

Known shapes, tried in order (first match wins):
  1. {"predictions": [...]}                       object-detection endpoint / placeholder
  2. {"detections": [...]}                        legacy format
  3. [{"predictions": {"predictions": [...]}}, …]  workflow output, bare or under "outputs"
     ({"predictions": [...]} inside a wrapper is accepted as well)

For 3, wrappers are scanned in order and the first one holding a list wins;
later wrappers are not merged in. No match means zero detections, not an error.
"""
from typing import Callable, Optional

from nutcounter.orchestrator.contracts import DetectionRecord, RawInferenceResult

# Label field precedence: the provider's native "class" first, "label" for older payloads
LABEL_FIELDS = ("class", "label")

ShapeMatcher = Callable[[RawInferenceResult], Optional[list]]


def _top_level(key: str) -> ShapeMatcher:
    def match(raw):
        if isinstance(raw, dict) and isinstance(raw.get(key), list):
            return raw[key]
        return None
    match.__name__ = f"top_level_{key}"
    return match


def _wrapper_list(raw) -> Optional[list]:
    wrappers = raw.get("outputs") if isinstance(raw, dict) else raw
    if not isinstance(wrappers, list):
        return None
    for wrapper in wrappers:
        if not isinstance(wrapper, dict):
            continue
        inner = wrapper.get("predictions")
        if isinstance(inner, dict):
            inner = inner.get("predictions")
        if isinstance(inner, list):
            return inner
    return None


SHAPE_MATCHERS: tuple[ShapeMatcher, ...] = (
    _top_level("predictions"),
    _top_level("detections"),
    _wrapper_list,
)


def read_label(record) -> Optional[str]:
    if not isinstance(record, dict):
        return None
    for name in LABEL_FIELDS:
        if record.get(name) is not None:
            return str(record[name])
    return None


def _to_record(item) -> DetectionRecord:
    conf = item.get("confidence", 0.0) if isinstance(item, dict) else 0.0
    try:
        conf = float(conf)
    except (TypeError, ValueError):
        conf = 0.0
    return DetectionRecord(label=read_label(item), confidence=conf)


def extract_detections(raw: RawInferenceResult) -> tuple[list[DetectionRecord], list[str]]:
    """Return (records, diagnostics). Pure: same payload, same output."""
    diagnostics: list[str] = []
    for matcher in SHAPE_MATCHERS:
        found = matcher(raw)
        if found is not None:
            diagnostics.append(f"extraction: matched {matcher.__name__} ({len(found)} records)")
            records = [_to_record(item) for item in found]
            unlabeled = sum(1 for r in records if r.label is None)
            if unlabeled:
                diagnostics.append(f"extraction: {unlabeled} record(s) without a label field")
            return records, diagnostics

    diagnostics.append(f"extraction: no known shape in {type(raw).__name__} payload, 0 detections")
    return [], diagnostics
