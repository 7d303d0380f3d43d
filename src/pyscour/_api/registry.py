"""Registry search endpoint."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyscour._redact import redact_for_log
from pyscour._transport import Transport
from pyscour.config import ScourConfig
from pyscour.exceptions import ScourDecodeError
from pyscour.models.registry import RegistrySearchResponse
from pyscour.models.requests import RegistrySearchPayload

_logger = logging.getLogger(__name__)


def parse_search_response(body: Any, *, endpoint: str = "") -> RegistrySearchResponse:
    """Validate a decoded search body.

    Raises
    ------
    ScourDecodeError
        If the body is not an object or does not match the expected shape.
    """
    if not isinstance(body, dict):
        raise ScourDecodeError(
            f"Search response from {endpoint} is not an object: {type(body).__name__}",
            endpoint=endpoint,
        )
    try:
        return RegistrySearchResponse.model_validate(body)
    except ValidationError as exc:
        _logger.debug("Search response failed validation body=%s", redact_for_log(body))
        raise ScourDecodeError(
            f"Unexpected search response shape from {endpoint}: {exc.error_count()} errors",
            endpoint=endpoint,
        ) from exc


async def fetch_registrants(
    config: ScourConfig,
    transport: Transport,
    payload: RegistrySearchPayload,
) -> RegistrySearchResponse:
    """POST a search and return the validated response."""
    endpoint = config.search_url
    body = await transport.post_json(endpoint, payload.model_dump())
    response = parse_search_response(body, endpoint=endpoint)
    _logger.debug(
        "Registry search state=%s distance=%s status=%r registrants=%d",
        payload.state,
        payload.distance,
        response.status_message,
        len(response.registrants),
    )
    return response
