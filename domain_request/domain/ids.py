from __future__ import annotations

import importlib
import re

ulid_module = importlib.import_module("ulid")

SUBMISSION_ID_PREFIX = "sub_"
# Crockford base32 ULID after the prefix.
SUBMISSION_ID_PATTERN = r"^sub_[0-9A-HJKMNP-TV-Z]{26}$"
_SUBMISSION_ID_RE = re.compile(SUBMISSION_ID_PATTERN)


def new_submission_public_id() -> str:
    return f"{SUBMISSION_ID_PREFIX}{ulid_module.new().str}"


def is_submission_public_id(value: str) -> bool:
    return _SUBMISSION_ID_RE.fullmatch(value) is not None
