import base64
import json
import logging
import re
from typing import Any

import httpx

from .errors import UpstreamError
from .models import GuruFailure, GuruPage, GuruResult

logger = logging.getLogger(__name__)

BASIC_PREFIX = "Basic "
# Guru has used both relation names for its cursor links; "next" wins when both are present.
# The whole <...> target is the cursor, semicolons included.
NEXT_LINK_PATTERNS = tuple(re.compile(rf'<([^>]+)>;\s*rel="{rel}"') for rel in ("next", "next-page"))


class GuruClient:
    """Client for making authenticated requests to the Guru API"""

    def __init__(
        self,
        base_url: str,
        email: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the API client

        Args:
            base_url: Base URL of the Guru API, e.g. https://api.getguru.com/api/v1
            email: Guru user e-mail (Basic auth identity)
            token: Guru API token (Basic auth secret)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests to stub the network)
        """
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.timeout = timeout
        self._transport = transport

        # Computed once; credentials never change for the life of the process
        credentials = base64.b64encode(f"{email}:{token}".encode()).decode("ascii")
        self.auth_header = f"{BASIC_PREFIX}{credentials}"

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with authentication"""
        return {
            "Authorization": self.auth_header,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def build_url(self, path: str) -> str:
        """Absolute URLs (pagination cursors) are used verbatim, anything else is relative to base_url."""
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> GuruResult:
        """
        Make one request to the Guru API

        Args:
            path: Relative API path (e.g. "/cards/abc") or an absolute next-page URL
            method: HTTP method
            body: JSON-serialisable request body, if any
            headers: Extra headers; they cannot replace Authorization, Content-Type or Accept

        Returns:
            GuruPage with the parsed body (None when empty) and the next-page URL,
            or GuruFailure when the call failed for any reason
        """
        url = self.build_url(path)
        # Header names are case-insensitive; the fixed headers replace any caller spelling of them
        request_headers = httpx.Headers(headers or {})
        request_headers.update(self._get_headers())

        logger.info(f"🔍 Guru API Request: {method} {url}")

        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                http2=True,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, json=body, headers=request_headers)

                if not response.is_success:
                    logger.warning(f"❌ Response: {response.status_code}")
                    raise UpstreamError(response.status_code, response.text)

                text = response.text
                payload = json.loads(text) if text else None
                next_url = extract_next_url(response)

                logger.info(f"✅ Response: {response.status_code}")
                if isinstance(payload, list):
                    logger.info(f"   Items returned: {len(payload)}")
                if next_url:
                    logger.debug(f"   Next page: {next_url}")

                return GuruPage(payload=payload, next_url=next_url)
        except UpstreamError as e:
            return GuruFailure(error=e)
        except (httpx.HTTPError, httpx.InvalidURL, json.JSONDecodeError) as e:
            logger.warning(f"❌ Request to {url} failed: {e}")
            return GuruFailure(error=e)


def extract_next_url(response: httpx.Response) -> str | None:
    """Return the URL of the "next" (or "next-page") relation in the Link header, if present."""
    link_header = response.headers.get("Link")
    if not link_header:
        return None
    for pattern in NEXT_LINK_PATTERNS:
        match = pattern.search(link_header)
        if match:
            return match.group(1)
    return None
