"""
API Faker — Route Dependencies
================================

What:  Small FastAPI dependencies shared by the resource routes.
How:   Injected with Depends(); each reads from the Request only.

    get_resource_service          → the ResourceService stored on app.state
    read_json_body                → parsed body, or None when empty/unparseable
    warn_on_non_json_content_type → logs, never rejects
"""

import json
import logging
import math
from typing import Any

from fastapi import Request

from apifaker.middleware.request_id import request_id_var
from apifaker.services.resource_service import ResourceService

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"{text} is out of range")
    return value


def get_resource_service(request: Request) -> ResourceService:
    """The service built by create_app(); one per application."""
    return request.app.state.resource_service


async def read_json_body(request: Request) -> Any:
    """
    Parse the request body as JSON without rejecting anything.

    An empty or malformed body yields None, which the service rejects as
    "not a JSON object" only after the read-only check has run. NaN,
    Infinity and overflowing literals such as 1e999 count as malformed:
    they could be stored but never rendered.
    """
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as e:
        logger.warning(
            "[%s] Unparseable JSON body on %s %s: %s",
            request_id_var.get(""), request.method, request.url.path, str(e),
        )
        return None


def warn_on_non_json_content_type(request: Request) -> None:
    """Body-carrying writes should declare application/json; missing or other types only warn."""
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        logger.warning(
            "[%s] Content-Type should be application/json (got %r) on %s %s",
            request_id_var.get(""),
            content_type or None,
            request.method,
            request.url.path,
        )
