"""Record fetcher speaking to the document store's REST facade over httpx."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import httpx

from farm_analytics.data.normalizers import (
    normalize_inventory,
    normalize_production,
    normalize_usage,
)
from farm_analytics.domain.exceptions import (
    RecordFetchError,
    RecordNormalizationError,
    RecordStoreUnavailable,
)
from farm_analytics.domain.interfaces import IRecordFetcher
from farm_analytics.domain.models import (
    DateRange,
    InventoryItem,
    ProductionRecord,
    UsageKind,
    UsageRecord,
)
from farm_analytics.utils.retry import retry

R = TypeVar("R")

PRODUCTION_PATH = "/farms/{farm_id}/egg-collections"
USAGE_PATHS = {
    UsageKind.FEED: "/farms/{farm_id}/feed-usage",
    UsageKind.MEDICINE: "/farms/{farm_id}/medicine-usage",
}
INVENTORY_PATHS = {
    UsageKind.FEED: "/farms/{farm_id}/feed-inventory",
    UsageKind.MEDICINE: "/farms/{farm_id}/medicine-inventory",
}
BIRD_STATS_PATH = "/farms/{farm_id}/birds/stats"


@dataclass(frozen=True)
class FetcherConfig:
    """Connection settings for the record store."""

    base_url: str
    api_key: Optional[str] = None
    timeout: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 0.5
    max_backoff: float = 8.0
    page_limit: int = 10000

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must be provided")
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.backoff_factor < 0:
            raise ValueError("backoff_factor cannot be negative")
        if self.max_backoff < self.backoff_factor:
            raise ValueError("max_backoff cannot be below backoff_factor")
        if self.page_limit <= 0:
            raise ValueError("page_limit must be greater than zero")


class HttpRecordFetcher(IRecordFetcher):
    """Fetches raw documents and canonicalizes them at the boundary."""

    def __init__(
        self,
        http_client: httpx.Client,
        config: FetcherConfig,
        *,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._http = http_client
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def fetch_production(
        self, farm_id: str, date_range: DateRange
    ) -> List[ProductionRecord]:
        documents = self._get_documents(
            PRODUCTION_PATH.format(farm_id=farm_id),
            {
                "startDate": date_range.start_day,
                "endDate": date_range.end_day,
                "limit": self.config.page_limit,
            },
        )
        return self._canonicalize(documents, farm_id, normalize_production)

    def fetch_usage(
        self, farm_id: str, date_range: DateRange, kind: UsageKind
    ) -> List[UsageRecord]:
        documents = self._get_documents(
            USAGE_PATHS[kind].format(farm_id=farm_id),
            {"dateFrom": date_range.start_day, "dateTo": date_range.end_day},
        )
        return self._canonicalize(
            documents, farm_id, lambda document: normalize_usage(document, kind)
        )

    def fetch_inventory(self, farm_id: str) -> List[InventoryItem]:
        items: List[InventoryItem] = []
        for kind, path in INVENTORY_PATHS.items():
            documents = self._get_documents(
                path.format(farm_id=farm_id), {"limit": self.config.page_limit}
            )
            items.extend(
                self._canonicalize(
                    documents,
                    farm_id,
                    lambda document, kind=kind: normalize_inventory(document, kind),
                )
            )
        return items

    def count_birds(self, farm_id: str) -> int:
        payload = self._request(BIRD_STATS_PATH.format(farm_id=farm_id), {})
        data = payload.get("data", payload) if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise RecordFetchError(
                "Malformed bird statistics", context={"farm_id": farm_id}
            )
        try:
            return int(data.get("totalBirds") or 0)
        except (TypeError, ValueError) as exc:
            raise RecordFetchError(
                "Malformed bird statistics", context={"farm_id": farm_id}
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _canonicalize(
        self,
        documents: List[Mapping[str, Any]],
        farm_id: str,
        normalize: Callable[[Mapping[str, Any]], R],
    ) -> List[R]:
        """Normalize the farm's documents, skipping the ones that cannot be read."""

        records: List[R] = []
        for document in documents:
            if not _belongs_to(document, farm_id):
                continue
            try:
                records.append(normalize(document))
            except RecordNormalizationError as exc:
                self.logger.warning(
                    "record_skipped",
                    extra={"document_id": document.get("id"), **exc.to_log_fields()},
                )
        return records

    def _get_documents(
        self, path: str, params: Mapping[str, Any]
    ) -> List[Mapping[str, Any]]:
        payload = self._request(path, params)
        documents = payload.get("data", []) if isinstance(payload, dict) else payload
        if not isinstance(documents, list):
            raise RecordFetchError("Malformed record store response", context={"path": path})
        return [document for document in documents if isinstance(document, dict)]

    def _request(self, path: str, params: Mapping[str, Any]) -> Any:
        retry_kwargs: Dict[str, Any] = {
            "attempts": self.config.max_retries + 1,
            "delay": self.config.backoff_factor,
            "max_delay": self.config.max_backoff,
            "exceptions": (RecordStoreUnavailable,),
        }
        if self._sleep is not None:
            retry_kwargs["sleep"] = self._sleep
        fetch = retry(**retry_kwargs)(self._request_once)
        try:
            return fetch(path, params)
        except RecordStoreUnavailable:
            self.logger.error(
                "record_store_unavailable",
                extra={"path": path, "attempts": self.config.max_retries + 1},
            )
            raise

    def _request_once(self, path: str, params: Mapping[str, Any]) -> Any:
        url = f"{self.config.base_url.rstrip('/')}{path}"
        self.logger.debug("record_fetch", extra={"url": url, "params": dict(params)})
        try:
            http_response = self._http.get(
                url,
                params=dict(params),
                headers=self._headers(),
                timeout=self.config.timeout,
            )
        except httpx.TransportError as exc:
            raise RecordStoreUnavailable(
                "Record store unreachable", context={"url": url}
            ) from exc
        return self._map_response(http_response, url)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    @staticmethod
    def _map_response(http_response: httpx.Response, url: str) -> Any:
        status = http_response.status_code
        if status == 429 or status >= 500:
            raise RecordStoreUnavailable(
                "Record store temporarily failing",
                context={"status_code": status, "url": url},
            )
        if status >= 400:
            raise RecordFetchError(
                "Record store rejected the query",
                context={"status_code": status, "url": url},
            )
        try:
            return http_response.json()
        except ValueError as exc:
            raise RecordFetchError(
                "Record store returned invalid JSON", context={"url": url}
            ) from exc


def _belongs_to(document: Mapping[str, Any], farm_id: str) -> bool:
    owner = document.get("farmId") or document.get("farm_id")
    return not owner or owner == farm_id
