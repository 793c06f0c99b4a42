from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from flask import jsonify


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data, "timestamp": _timestamp()}), status


def error(code: str, message: str, status: int):
    return (
        jsonify({"success": False, "error": {"code": code, "message": message}, "timestamp": _timestamp()}),
        status,
    )
