# marketplace/api/responses.py
import secrets
import time
from typing import Any

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return f"req-{int(time.time() * 1000)}-{secrets.token_hex(5)}"


def ok(data: Any) -> dict:
    return {"success": True, "data": data}


def error_body(message: str, details: Any = None) -> dict:
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return body
