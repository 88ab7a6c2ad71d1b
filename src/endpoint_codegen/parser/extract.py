"""Endpoint export parser.

Reads the JSON export of a single API endpoint and converts it into a
ParsedData record. Absent fields fall back to empty values.
"""

import json
import logging
from pathlib import Path

import pydantic

from endpoint_codegen.errors import EmptyInputError, ParseError
from endpoint_codegen.parser.base import ParsedData

logger = logging.getLogger(__name__)


def extract_metadata(text: str) -> ParsedData:
    """Parse raw JSON text into a ParsedData record."""
    if not text.strip():
        raise EmptyInputError()
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder allows
        raise ParseError() from e

    if not isinstance(data, dict):
        data = {}

    method = _get(data, "method", default="")
    request_params = (
        _get(data, "request", "query", "parameter", default=[])
        if str(method).upper() == "GET"
        else _get(data, "request", "body", "raw_parameter", default=[])
    )

    try:
        parsed = ParsedData(
            name=_get(data, "name", default=""),
            method=method,
            url=sanitize_url(str(_get(data, "url", default=""))),
            request_params=request_params,
            request_raw=_get(data, "request", "body", "raw", default=""),
            responses=_get(data, "response", "example", default=[]),
        )
    except pydantic.ValidationError as e:
        raise ParseError(f"无法读取接口结构：{e.error_count()} 处字段格式不符。") from e

    logger.debug(
        "Extracted %s %s (%d request params, %d responses)",
        parsed.method, parsed.url, len(parsed.request_params), len(parsed.responses),
    )
    return parsed


def extract_metadata_file(file_path: Path) -> ParsedData:
    """Read an endpoint export file and extract its metadata."""
    return extract_metadata(file_path.read_text(encoding="utf-8"))


def sanitize_url(url: str) -> str:
    """Reduce a full URL to its API path.

    https://host/v1/api/users?x=1 -> /api/users
    api/users -> /api/users
    """
    api_index = url.find("/api")
    if api_index != -1:
        url = url[api_index:]
    elif url.startswith("api"):
        url = f"/{url}"
    return url.split("?", 1)[0]


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _get(data: dict, *path: str, default):
    """Walk nested dicts; missing keys, nulls and non-dict parents yield ``default``."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
    return default if current is None else current
