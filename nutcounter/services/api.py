import base64
import logging
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from nutcounter.services.config import load_settings
from nutcounter.services.models import (
    ProcessImageRequest, ProcessImageResponse,
    StatusResponse, SubmissionSummary, HealthResponse,
)
from nutcounter.services.status_store import StatusStore
from nutcounter.orchestrator.errors import InferenceError
from nutcounter.orchestrator.pipeline import SubmissionPipeline
from nutcounter.adapters.inference.roboflow_workflow import RoboflowWorkflow

logging.basicConfig(level=logging.INFO)

settings = load_settings()

app = FastAPI(title="nut-counter")

status = StatusStore()

inference = RoboflowWorkflow(status, settings)
status.log(f"inference adapter: {type(inference).__name__} mode={inference.mode}")

# Sheet adapter: SHEET_ADAPTER env var (google | mock, default: google)
if settings.sheet_adapter == "mock":
    from nutcounter.adapters.sheets.mock_sheet import MockSheet
    writer = MockSheet(status)
else:
    from nutcounter.adapters.sheets.google_sheets import GoogleSheetsWriter
    writer = GoogleSheetsWriter(status, settings)
status.log(f"sheet adapter: {type(writer).__name__}")
status.log(f"vocabulary: {list(settings.vocabulary)}")

pipeline = SubmissionPipeline(inference=inference, writer=writer, vocabulary=settings.vocabulary, status_store=status)


NO_IMAGE = "No image data provided."


def _decode_image(image: str) -> bytes:
    # Accept "data:image/jpeg;base64,...." as sent by browser FileReader
    if image.startswith("data:") and "," in image:
        image = image.split(",", 1)[1]
    return base64.b64decode(image)


def _error(status_code: int, message: str, error: str | None = None, headers: dict | None = None) -> JSONResponse:
    # One body shape for every error this service returns: {message, error}
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "error": error or message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    if request.url.path != "/process-image":
        return await request_validation_exception_handler(request, exc)
    # No body, non-JSON body, or a non-string image: all count as "no usable image"
    first = exc.errors()[0] if exc.errors() else {}
    status.log(f"PROCESS_IMAGE rejected body: {first.get('msg', 'invalid body')}", level="warning")
    return _error(400, NO_IMAGE, error=first.get("msg"))


@app.post("/process-image", response_model=ProcessImageResponse)
def process_image(req: ProcessImageRequest):
    if not req.image:
        return _error(400, NO_IMAGE)
    try:
        image_bytes = _decode_image(req.image)
    except ValueError as e:
        status.log(f"PROCESS_IMAGE decode error: {e}", level="warning")
        return _error(400, "Image data is not valid base64.", error=str(e))
    if not image_bytes:
        return _error(400, NO_IMAGE)

    status.log(f"PROCESS_IMAGE received file={req.file_name!r}")
    try:
        result = pipeline.process(image_bytes, req.file_name)
    except InferenceError as e:
        status.last_error = str(e)
        status.log(f"PROCESS_IMAGE inference error: {e}", level="error")
        return _error(500, f"Internal server error: {e}", error=str(e))

    status.last_result = result
    status.last_error = None
    return ProcessImageResponse(
        status=result.outcome.status,
        outcome=result.outcome.kind.value,
        failure_class=result.outcome.failure_class,
        row=result.row.as_list(),
        class_counts=result.row.class_counts,
        total=result.row.total,
        diagnostics=list(result.diagnostics),
    )


@app.api_route("/process-image", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def process_image_wrong_method(request: Request):
    return _error(405, f"Method {request.method} not allowed", headers={"Allow": "POST"})


@app.get("/status", response_model=StatusResponse)
def get_status():
    last = status.last_result
    summary = None
    if last is not None:
        summary = SubmissionSummary(
            submission_id=last.row.submission_id,
            outcome=last.outcome.kind.value,
            class_counts=last.row.class_counts,
            total=last.row.total,
        )
    return StatusResponse(last_submission=summary, last_error=status.last_error, logs=status.logs)


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        inference_mode=pipeline.inference.mode,
        sheet_adapter=type(pipeline.writer).__name__,
        sheet_configured=pipeline.writer.configured,
        vocabulary=list(pipeline.vocabulary),
    )
