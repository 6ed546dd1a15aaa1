"""HTTP client for the warranty backend endpoints that supply raw movements."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urljoin

import requests

from .config import settings
from .domain_errors import UpstreamError

logger = logging.getLogger(__name__)

MOVEMENTS_BASE = "inventory-movements"
CENTERS_BASE = "centers"
INVENTORY_LOTS_BASE = "inventory-lots"


class InventoryMovementClient:
    """Thin read-side client; returns decoded JSON bodies as-is."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        bearer: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or settings.upstream_base_url).rstrip("/") + "/"
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        bearer = bearer if bearer is not None else settings.UPSTREAM_BEARER
        if bearer:
            self.session.headers["Authorization"] = f"Bearer {bearer}"

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        url = urljoin(self.base_url, path)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.exception("Upstream request failed: GET %s", url)
            raise UpstreamError(
                code="UPSTREAM_UNAVAILABLE",
                http_status=502,
                message="Inventory backend is unavailable",
                details={"path": path},
            ) from exc

        if response.status_code == 404:
            raise UpstreamError(
                code="UPSTREAM_NOT_FOUND",
                http_status=404,
                message="Resource not found in inventory backend",
                details={"path": path},
            )
        if response.status_code >= 400:
            logger.warning("upstream.error status=%s path=%s body=%s", response.status_code, path, response.text[:200])
            raise UpstreamError(
                code="UPSTREAM_UNAVAILABLE",
                http_status=502,
                message=f"Inventory backend responded with HTTP {response.status_code}",
                details={"path": path, "status": response.status_code},
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.exception("Upstream returned a non-JSON body: GET %s", url)
            raise UpstreamError(
                code="UPSTREAM_UNAVAILABLE",
                http_status=502,
                message="Inventory backend returned an unreadable payload",
                details={"path": path},
            ) from exc

    def search(self, params: Mapping[str, Any]) -> Any:
        return self._get(f"{MOVEMENTS_BASE}/search", params=params)

    def get_by_id(self, movement_id: str) -> Any:
        return self._get(f"{MOVEMENTS_BASE}/{quote(movement_id, safe='')}/get")

    def list_by_center(self, center_id: str) -> Any:
        return self._get(f"{MOVEMENTS_BASE}/{quote(center_id, safe='')}/list-by-center")

    def list_by_appointment(self, appointment_id: str) -> Any:
        return self._get(f"{MOVEMENTS_BASE}/{quote(appointment_id, safe='')}/list-by-appointment")

    def traceability_by_vin(self, vin: str) -> Any:
        return self._get(f"{MOVEMENTS_BASE}/traceability/{quote(vin, safe='')}/parts")

    def list_inventory_lots_by_center(self, center_id: str) -> Any:
        return self._get(f"{INVENTORY_LOTS_BASE}/by-center/{quote(center_id, safe='')}/get")

    def list_centers(self) -> Any:
        return self._get(f"{CENTERS_BASE}/get-all")


def center_lookup(centers: Any) -> dict[str, str]:
    """`id -> display name` from a centers list payload."""
    lookup: dict[str, str] = {}
    if not isinstance(centers, list):
        return lookup
    for center in centers:
        if not isinstance(center, Mapping):
            continue
        center_id = center.get("id") or center.get("centerId")
        if not center_id:
            continue
        lookup[str(center_id)] = center.get("name") or center.get("centerName") or f"Center {center_id}"
    return lookup


_client: InventoryMovementClient | None = None


def get_client() -> InventoryMovementClient:
    """FastAPI dependency returning the process-wide client."""
    global _client
    if _client is None:
        _client = InventoryMovementClient()
    return _client
