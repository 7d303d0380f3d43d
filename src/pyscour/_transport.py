"""JSON-over-HTTP transport for the registry API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyscour._constants import USER_AGENT
from pyscour._redact import redact_for_log
from pyscour.exceptions import ScourDecodeError, ScourTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        ...


class JsonTransport:
    """aiohttp transport that posts JSON and decodes JSON replies."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 20.0,
    ) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        """POST *payload* as JSON and return the decoded response body.

        Raises
        ------
        ScourTransportError
            On connection failure, timeout or a non-2xx status.
        ScourDecodeError
            When the body is not valid JSON.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(payload, separators=(",", ":"))

        _logger.debug("POST %s payload=%s", url, redact_for_log(payload))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise ScourTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except ScourTransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ScourTransportError(
                f"Request to {url} failed: {exc!r}",
                endpoint=url,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ScourDecodeError(
                f"Invalid JSON from {url}: {text[:200]}",
                endpoint=url,
            ) from exc
