import logging
from dataclasses import dataclass, field
from typing import Optional, List
from nutcounter.orchestrator.contracts import TallyResult

logger = logging.getLogger("nutcounter")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

MAX_LOG_LINES = 200

@dataclass
class StatusStore:
    last_result: Optional[TallyResult] = None
    last_error: Optional[str] = None
    logs: List[str] = field(default_factory=list)

    def log(self, msg: str, level: str = "info"):
        logger.log(_LEVELS.get(level, logging.INFO), msg)
        self.logs.append(msg if level == "info" else f"[{level}] {msg}")
        if len(self.logs) > MAX_LOG_LINES:
            self.logs = self.logs[-MAX_LOG_LINES:]
