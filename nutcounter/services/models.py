from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal, Optional

class ProcessImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image: Optional[str] = None                                   # base64 (data URL prefix allowed)
    file_name: Optional[str] = Field(default=None, alias="fileName")

class ProcessImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Image processed. Sheet update logic executed."
    status: str                                                   # sheet outcome, shown to the user as-is
    outcome: Literal["success", "missing_credential", "write_failure"]
    failure_class: Optional[Literal["permission", "generic"]] = Field(default=None, alias="failureClass")
    row: list[Any]                                                # [timestamp, fileName, *counts, total]
    class_counts: dict[str, int] = Field(alias="classCounts")
    total: int
    diagnostics: list[str] = []

class SubmissionSummary(BaseModel):
    submission_id: Optional[str] = None
    outcome: str
    class_counts: dict[str, int]
    total: int

class StatusResponse(BaseModel):
    last_submission: Optional[SubmissionSummary] = None
    last_error: Optional[str] = None
    logs: list[str]

class HealthResponse(BaseModel):
    api: bool = True
    inference_mode: Literal["real", "placeholder"]
    sheet_adapter: str
    sheet_configured: bool
    vocabulary: list[str]
