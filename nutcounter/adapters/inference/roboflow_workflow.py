"""
Roboflow serverless workflow client.
Requires ROBOFLOW_API_KEY in nutcounter/.env (or the process environment);
without it every call is served by the placeholder result set.

One POST per image, no retry. The workflow URL and timeout come from Settings.
"""
import base64
import httpx
from nutcounter.adapters.inference.base import InferenceAdapter
from nutcounter.adapters.inference.placeholder import PlaceholderInference
from nutcounter.orchestrator.errors import InferenceTransportError, ProviderRejectedError


def redact(secret: str | None, keep: int = 4) -> str:
    if not secret:
        return "<unset>"
    return f"{secret[:keep]}****"


class RoboflowWorkflow(InferenceAdapter):
    def __init__(self, status_store, settings):
        self.status = status_store
        self._api_key = settings.roboflow_api_key
        self._url = settings.roboflow_workflow_url
        self._timeout = settings.inference_timeout_s
        self._ready = bool(self._api_key)
        self._placeholder = PlaceholderInference(status_store)
        if self._ready:
            self.status.log(f"roboflow: ready (key={redact(self._api_key)}, timeout={self._timeout}s)")
        else:
            self.status.log("roboflow: ROBOFLOW_API_KEY not set, placeholder results will be served", level="warning")

    @property
    def mode(self) -> str:
        return "real" if self._ready else "placeholder"

    def infer(self, image_bytes: bytes, submission_id: str | None = None):
        if not self._ready:
            return self._placeholder.infer(image_bytes, submission_id)

        self.status.log(f"inference: REAL mode, sending {submission_id!r} to workflow (key={redact(self._api_key)})")
        b64 = base64.standard_b64encode(image_bytes).decode("utf-8")
        payload = {
            "api_key": self._api_key,
            "inputs": {
                "image": {"type": "base64", "value": b64},
            },
        }

        try:
            resp = httpx.post(self._url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            self.status.log(f"roboflow: transport error: {type(e).__name__}: {e}", level="error")
            raise InferenceTransportError(str(e) or type(e).__name__) from e

        data = self._decode(resp)
        if not resp.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            message = message or f"Roboflow API call failed with HTTP {resp.status_code}"
            self.status.log(f"roboflow: HTTP {resp.status_code}: {message}", level="error")
            raise ProviderRejectedError(message, status_code=resp.status_code)
        if data is None:
            self.status.log(f"roboflow: non-JSON body: {resp.text[:300]}", level="error")
            raise ProviderRejectedError("Roboflow returned a non-JSON response", status_code=resp.status_code)

        if not (isinstance(data, dict) and "predictions" in data):
            self.status.log("roboflow: response has no top-level 'predictions' key", level="warning")
        return data

    @staticmethod
    def _decode(resp: httpx.Response):
        try:
            return resp.json()
        except ValueError:
            return None
