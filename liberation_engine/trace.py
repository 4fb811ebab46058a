import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_LOG_DIR = os.getenv("LIBERATION_TRACE_DIR", os.path.join(os.getcwd(), "logs"))
DEFAULT_LOG_FILE = "liberation_trace.jsonl"

log = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_trace_context() -> Dict[str, Any]:
    return {
        "request_id": str(uuid.uuid4()),
        "timestamp": utc_now_iso(),
    }


class TraceLogger:
    """
    Writes one JSON object per decision (JSONL).
    Fail-safe: a failed write never blocks the decision it records.
    """
    def __init__(self, log_dir: str = DEFAULT_LOG_DIR, filename: str = DEFAULT_LOG_FILE) -> None:
        self.log_dir = log_dir
        self.filename = filename
        self.path = os.path.join(self.log_dir, self.filename)

    def write(self, trace_obj: Dict[str, Any]) -> None:
        try:
            os.makedirs(self.log_dir, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(trace_obj, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            log.warning("trace write failed path=%s err=%s", self.path, e)

    def record(self, kind: str, payload: Dict[str, Any], ctx: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        entry = dict(ctx or new_trace_context())
        entry["kind"] = kind
        entry["result"] = payload
        self.write(entry)
        return entry
