"""Fixed detection set served when no provider key is configured."""
import copy
from nutcounter.adapters.inference.base import InferenceAdapter

# walnut x2, almond x1, pistachio x1 (pistachio is outside the default vocabulary)
PLACEHOLDER_RESULT = {
    "predictions": [
        {"label": "walnut", "confidence": 0.97},
        {"label": "almond", "confidence": 0.91},
        {"label": "walnut", "confidence": 0.95},
        {"label": "pistachio", "confidence": 0.85},
    ],
}

class PlaceholderInference(InferenceAdapter):
    def __init__(self, status_store):
        self.status = status_store

    @property
    def mode(self) -> str:
        return "placeholder"

    def infer(self, image_bytes: bytes, submission_id: str | None = None):
        self.status.log(
            f"inference: PLACEHOLDER mode for {submission_id!r} (ROBOFLOW_API_KEY not set)",
            level="warning",
        )
        return placeholder_result()

def placeholder_result() -> dict:
    # Deep copy so callers can't alter the shared constant
    return copy.deepcopy(PLACEHOLDER_RESULT)
