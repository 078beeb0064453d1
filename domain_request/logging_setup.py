from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

# Extra keys copied from LogRecord into the JSON payload. Anything else passed
# through `extra=` is dropped so untrusted request content never becomes a key.
EXTRA_KEYS = (
    "role",
    "service",
    "run_id",
    "submission_id",
    "user_id",
    "applicant_name",
    "email",
    "purpose",
    "submitted_at",
    "upstream_status",
    "upstream_reason",
    "upstream_body",
    "status_code",
    "error_code",
    "error_type",
    "has_admin_api_url",
    "has_admin_api_key",
    "event",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key in EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
