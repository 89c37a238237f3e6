"""Envelope used by the triage endpoints and every error response.

The original report/stats endpoints return bare JSON and do not use it.
"""
from typing import Any


def success_response(data: Any = None, message: str | None = None) -> dict:
    return {"status": "success", "data": data, "message": message}


def error_response(message: str, data: Any = None) -> dict:
    return {"status": "error", "data": data, "message": message}
