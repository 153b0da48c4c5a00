"""
Process-wide settings, read once at startup from the environment
(and nutcounter/.env if present). Passed explicitly to adapters and the pipeline.
"""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

DEFAULT_WORKFLOW_URL = "https://serverless.roboflow.com/nut-detection-cn8ep/workflows/detect-count-and-visualize"
DEFAULT_VOCABULARY = ("walnut", "almond")


@dataclass(frozen=True)
class Settings:
    roboflow_api_key: Optional[str] = None
    roboflow_workflow_url: str = DEFAULT_WORKFLOW_URL
    google_sheet_id: Optional[str] = None
    google_credentials_json: Optional[str] = None
    sheet_name: str = "Sheet1"
    sheet_adapter: str = "google"          # google | mock
    vocabulary: tuple[str, ...] = DEFAULT_VOCABULARY
    inference_timeout_s: float = 30.0
    sheets_timeout_s: float = 15.0


def parse_vocabulary(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_VOCABULARY
    labels = []
    for part in raw.split(","):
        part = part.strip()
        if part and part not in labels:
            labels.append(part)
    return tuple(labels) or DEFAULT_VOCABULARY


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings(dotenv_path: Optional[str] = "nutcounter/.env") -> Settings:
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)
    return Settings(
        roboflow_api_key=os.getenv("ROBOFLOW_API_KEY") or None,
        roboflow_workflow_url=os.getenv("ROBOFLOW_WORKFLOW_URL", DEFAULT_WORKFLOW_URL),
        google_sheet_id=os.getenv("GOOGLE_SHEET_ID") or None,
        google_credentials_json=os.getenv("GOOGLE_CREDENTIALS_JSON") or None,
        sheet_name=os.getenv("SHEET_NAME", "Sheet1"),
        sheet_adapter=os.getenv("SHEET_ADAPTER", "google").lower(),
        vocabulary=parse_vocabulary(os.getenv("CLASS_VOCABULARY")),
        inference_timeout_s=_float_env("INFERENCE_TIMEOUT_S", 30.0),
        sheets_timeout_s=_float_env("SHEETS_TIMEOUT_S", 15.0),
    )
