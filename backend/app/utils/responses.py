"""
Success envelope used by every endpoint:

    {"success": true, "message": "...", "data": ..., "pagination": {...}}
"""
from typing import Any, Dict, Optional


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    pagination: Optional[Dict[str, Any]] = None,
    **extra: Any
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    body.update(extra)
    return body
