"""
Response envelope helpers
Every endpoint answers {"success": true, "data": ...} or
{"success": false, "message": ..., "code"?: ..., "details"?: ...}
"""

from typing import Any, Optional


def success(data: Any) -> dict:
    return {"success": True, "data": data}


def error(message: str, code: Optional[str] = None, details: Any = None) -> dict:
    response = {"success": False, "message": message}
    if code:
        response["code"] = code
    if details:
        response["details"] = details
    return response
