"""Postal PIN code lookup client.

Wraps the public India Post lookup API:
`GET {base}/pincode/{pin}` returns a JSON array whose first item carries
`Status` and a `PostOffice` list. A lookup succeeds only when
`[0].Status == "Success"`; district and state come from the first post
office.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from udyamform.config import DEFAULT_PIN_LOOKUP_BASE_URL

logger = logging.getLogger(__name__)

# ASCII digits only; str.isdigit and \d also accept other scripts
PIN_RE = re.compile(r"[0-9]{6}")


class PinLookupError(RuntimeError):
    """Raised when a PIN cannot be resolved to a district and state."""


@dataclass(frozen=True)
class PinLocation:
    district: str
    state: str


def parse_pin_response(data: Any) -> PinLocation:
    """Extract district/state from a lookup API response body."""
    item = data[0] if isinstance(data, list) and data else None
    if not isinstance(item, dict) or item.get("Status") != "Success":
        raise PinLookupError("Invalid PIN")
    offices = item.get("PostOffice") or []
    office = offices[0] if isinstance(offices, list) and offices else {}
    if not isinstance(office, dict):
        office = {}
    return PinLocation(district=str(office.get("District") or ""), state=str(office.get("State") or ""))


class PinLookupClient:
    """Async lookup client; pass `client` to share or mock the transport."""

    def __init__(
        self,
        base_url: str = DEFAULT_PIN_LOOKUP_BASE_URL,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def lookup(self, pin: str) -> PinLocation:
        if not PIN_RE.fullmatch(pin or ""):
            raise PinLookupError(f"PIN must be 6 digits, got {pin!r}")
        url = f"{self.base_url}/pincode/{pin}"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PinLookupError(f"PIN lookup failed for {pin}: {exc}") from exc
        location = parse_pin_response(data)
        logger.info("pin_lookup_resolved pin=%s district=%s state=%s", pin, location.district, location.state)
        return location

    # The form controller takes a plain async callable
    __call__ = lookup

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["PinLocation", "PinLookupClient", "PinLookupError", "parse_pin_response"]
