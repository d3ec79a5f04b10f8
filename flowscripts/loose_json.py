from __future__ import annotations

import json
import re
from typing import Any

TRAILING_COMMA_RE = re.compile(r",\s*}\s*$")


def normalize_loose_object(text: str) -> str:
    body = text.strip()
    if not body.startswith("{"):
        body = "{" + body + "}"
    return TRAILING_COMMA_RE.sub("}", body)


def parse_loose_object(text: str) -> dict[str, Any]:
    # Braces are optional and one trailing comma is tolerated; the rest must be strict JSON.
    body = normalize_loose_object(text)
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise ValueError(f"E_LOOSE_JSON_INVALID: {exc.msg} at line {exc.lineno} column {exc.colno}") from exc
