# Status strings returned to the caller in ProcessImageResponse.status
STATUS_SUCCESS = "Success (Wrote to Sheet via Google API)"
STATUS_MISSING_KEY = "Failed to Authenticate (Missing Key)"
STATUS_PERMISSION = (
    "Failed to Write: Permission or Range error. "
    "Check if Service Account email has Editor access and if the sheet exists."
)
STATUS_WRITE_FAILED = "Failed to Write: {reason} (API Failure)"

# HTTP codes the Sheets API uses for bad range / no access
PERMISSION_STATUS_CODES = (400, 403)

REASON_MAX_CHARS = 50

TRANSPORT_PREFIX = "Roboflow inference failed: "


class InferenceError(Exception):
    """The image could not be analyzed. Fatal to the request."""


class ProviderRejectedError(InferenceError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InferenceTransportError(InferenceError):
    def __init__(self, message: str):
        super().__init__(f"{TRANSPORT_PREFIX}{message}")


class SheetWriteError(Exception):
    """Raised by sheet writers; always absorbed into a PersistenceOutcome."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MissingSheetCredentialError(SheetWriteError):
    def __init__(self, message: str = "GOOGLE_CREDENTIALS_JSON is not set"):
        super().__init__(message)
