"""Success side of the API envelope ``{success, message?, data?}``."""

from __future__ import annotations

from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    status: int = http_status.HTTP_200_OK,
    headers: Optional[dict] = None,
) -> Response:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return Response(body, status=status, headers=headers)
