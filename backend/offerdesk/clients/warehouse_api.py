"""
Warehouse API clients.

WHAT: HTTP access to the Request Store and the Distance Service
WHY: Keep endpoint paths, auth headers and error payloads out of the controller
HOW: HTTPX async client, retries with backoff for reads, typed exceptions
"""

import asyncio
import math

import httpx
from pydantic import ValidationError

from .types import (
    DistanceReading,
    StoreStatus,
    RequestStoreTimeoutError,
    RequestStoreUnavailableError,
    RequestStoreRejectedError,
    RequestStoreResponseError,
)
from ..core.config import settings
from ..models.request import ItemRequest, OfferStatus
from ..utils.logger import get_logger

logger = get_logger(__name__)

ITEM_REQUESTS_PATH = "/api/warehouse/item-requests"
OFFER_STATUS_PATH = "/api/warehouse/offers/{offer_id}/status"
OFFER_DISTANCES_PATH = "/api/warehouse/offer-distances/{request_id}"


class WarehouseApiClient:
    """Shared transport for the warehouse backend endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        client: httpx.AsyncClient | None = None
    ):
        """Initialize the client; settings fill in anything not given."""
        self.base_url = (base_url if base_url is not None else settings.REQUEST_STORE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.WAREHOUSE_API_TIMEOUT
        self.max_retries = max(1, max_retries if max_retries is not None else settings.WAREHOUSE_API_MAX_RETRIES)
        self.retry_delay = retry_delay if retry_delay is not None else settings.WAREHOUSE_API_RETRY_DELAY

        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(5.0, read=self.timeout),
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20
            )
        )

    @staticmethod
    def _auth_headers(token: str | None) -> dict[str, str]:
        # An unknown token is still sent, as an empty value
        return {"Authorization": f"Bearer {token}" if token else ""}

    @staticmethod
    def _error_message(response: httpx.Response) -> str | None:
        """Extract the `error` field of a failure payload, if any."""
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, str) and error:
                return error
        return None

    def _parse(self, response: httpx.Response):
        """Return the JSON body of a successful response."""
        if not response.is_success:
            raise RequestStoreRejectedError(response.status_code, self._error_message(response))
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from warehouse API (HTTP {response.status_code}): {e}")
            raise RequestStoreResponseError(f"Invalid response format: {e}", status_code=response.status_code) from e

    async def _get_json(self, path: str, *, token: str | None):
        """GET with retries on timeouts, connection errors and 5xx."""
        url = f"{self.base_url}{path}"

        for attempt in range(self.max_retries):
            is_last = attempt == self.max_retries - 1
            try:
                response = await self.client.get(url, headers=self._auth_headers(token))
            except httpx.TimeoutException as e:
                logger.warning(f"GET {path} timed out (attempt {attempt + 1}/{self.max_retries})")
                if is_last:
                    raise RequestStoreTimeoutError(f"Request timed out after {self.max_retries} attempts") from e
            except httpx.TransportError as e:
                logger.error(f"GET {path} failed: {e} (attempt {attempt + 1}/{self.max_retries})")
                if is_last:
                    raise RequestStoreUnavailableError(f"Warehouse API is not reachable at {self.base_url}") from e
            else:
                if response.status_code >= 500 and not is_last:
                    logger.error(f"GET {path} server error {response.status_code} (attempt {attempt + 1}/{self.max_retries})")
                else:
                    return self._parse(response)

            await asyncio.sleep(self.retry_delay * (2 ** attempt))

    async def ping(self) -> StoreStatus:
        """
        Check that the warehouse backend answers HTTP at all.

        Returns:
            StoreStatus with availability
        """
        try:
            await self.client.get(self.base_url, timeout=5.0)
            return StoreStatus(available=True, base_url=self.base_url)
        except httpx.TimeoutException:
            logger.warning("Warehouse API ping timed out")
            return StoreStatus(available=False, base_url=self.base_url, error="Connection timeout")
        except httpx.TransportError as e:
            logger.warning(f"Warehouse API not reachable: {e}")
            return StoreStatus(available=False, base_url=self.base_url, error="Connection refused")

    async def close(self) -> None:
        await self.client.aclose()


class RequestStoreClient(WarehouseApiClient):
    """Reads item requests and writes offer statuses."""

    async def list_item_requests(self, *, token: str | None) -> list[ItemRequest]:
        """
        Fetch all item requests.

        The store has no lookup by id; callers search the returned list.
        Records that fail validation are logged and left out.

        Raises:
            RequestStoreTimeoutError: Request timed out
            RequestStoreUnavailableError: Store not reachable
            RequestStoreRejectedError: Non-success status
            RequestStoreResponseError: Body is not a list of item requests
        """
        data = await self._get_json(ITEM_REQUESTS_PATH, token=token)
        if not isinstance(data, list):
            raise RequestStoreResponseError("Expected a list of item requests")

        requests = []
        for item in data:
            try:
                requests.append(ItemRequest.model_validate(item))
            except ValidationError as e:
                # One bad record must not hide the others
                item_id = item.get("id") if isinstance(item, dict) else None
                logger.warning(f"Skipping malformed item request {item_id!r}: {e.error_count()} error(s)")

        logger.debug(f"Fetched {len(requests)} of {len(data)} item requests")
        return requests

    async def update_offer_status(
        self,
        offer_id: str,
        status: OfferStatus,
        *,
        token: str | None
    ) -> dict:
        """
        Ask the store to change an offer's status. Never retried.

        Args:
            offer_id: Offer to update
            status: ACCEPTED or REJECTED
            token: Bearer token of the acting user

        Returns:
            The store's acknowledgement payload ({} when empty)

        Raises:
            RequestStoreRejectedError: Store refused; server_message carries its `error`
            RequestStoreTimeoutError / RequestStoreUnavailableError: Transport failure
            RequestStoreResponseError: Success status with an unparseable body
        """
        path = OFFER_STATUS_PATH.format(offer_id=offer_id)
        try:
            response = await self.client.patch(
                f"{self.base_url}{path}",
                json={"status": status.value},
                headers=self._auth_headers(token)
            )
        except httpx.TimeoutException as e:
            logger.warning(f"PATCH {path} timed out")
            raise RequestStoreTimeoutError("Offer status update timed out") from e
        except httpx.TransportError as e:
            logger.error(f"PATCH {path} failed: {e}")
            raise RequestStoreUnavailableError(f"Warehouse API is not reachable at {self.base_url}") from e

        data = self._parse(response)
        logger.info(f"Offer {offer_id} status set to {status.value}")
        return data if isinstance(data, dict) else {"data": data}


class DistanceServiceClient(WarehouseApiClient):
    """Reads precomputed vendor distances for a request's offers."""

    def __init__(self, base_url: str | None = None, **kwargs):
        super().__init__(
            base_url if base_url is not None else settings.get_distance_service_url(),
            **kwargs
        )

    async def get_offer_distances(self, request_id: str, *, token: str | None) -> list[DistanceReading]:
        """
        Fetch distances for all offers of a request.

        Entries with a missing, non-numeric, non-finite or negative distance come back
        with meters=None.
        """
        data = await self._get_json(OFFER_DISTANCES_PATH.format(request_id=request_id), token=token)
        entries = data.get("distances") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise RequestStoreResponseError("Expected a `distances` list")

        readings = []
        for entry in entries:
            if not isinstance(entry, dict) or entry.get("offerId") is None:
                logger.debug(f"Skipping distance entry without offerId: {entry!r}")
                continue
            readings.append(DistanceReading(
                offer_id=str(entry["offerId"]),
                meters=_coerce_meters(entry.get("distance"))
            ))
        return readings


def _coerce_meters(value) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        meters = float(value)
    except OverflowError:
        meters = math.inf
    if not math.isfinite(meters) or meters < 0:
        logger.warning(f"Ignoring invalid distance: {value}")
        return None
    return meters
