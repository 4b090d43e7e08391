"""Connector abstraction, errors, transport and pagination helpers."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, TypeVar

import httpx

from harvest.settings import Settings


logger = logging.getLogger(__name__)


class HarvestError(Exception):
    """Base harvester error."""


class ConnectorError(HarvestError):
    """Base connector error."""


class TransientError(ConnectorError):
    """Retryable error (e.g., rate limit, network hiccup)."""


class PermanentError(ConnectorError):
    """Non-retryable error (e.g., 4xx semantics)."""


class ParseError(PermanentError):
    """Response body is missing required fields."""


class CollectionError(HarvestError):
    """Listing pagination failed; the whole run is aborted."""


class DetailFetchError(HarvestError):
    """Detail request for one item failed."""

    def __init__(self, identifier: str, message: str) -> None:
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier


class SinkError(HarvestError):
    """Writing one output artifact failed."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


SleepFn = Callable[[float], None]


class Throttle:
    """Fixed delay applied before every outbound request."""

    def __init__(self, delay_seconds: float, sleep: Optional[SleepFn] = None) -> None:
        self.delay_seconds = float(delay_seconds)
        self._sleep = sleep or time.sleep

    def wait(self) -> None:
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)


class Transport(Protocol):
    def post_graphql(
        self,
        operation_name: str,
        query: str,
        variables: Dict[str, Any],
        *,
        referer: Optional[str] = None,
    ) -> Dict[str, Any]: ...

    def get_json(self, url: str) -> Dict[str, Any]: ...


class LeetCodeClient:
    """Blocking httpx transport for the GraphQL and REST endpoints.

    - 429 / 5xx / 네트워크 오류: ``TransientError``
    - 그 외 4xx, JSON 아님, GraphQL ``errors`` 만 있는 응답: ``PermanentError``
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=float(settings.timeout_seconds))
        self._headers = {
            "Content-Type": "application/json",
            "User-Agent": settings.user_agent,
            "Referer": settings.referer,
        }

    def __enter__(self) -> "LeetCodeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def post_graphql(
        self,
        operation_name: str,
        query: str,
        variables: Dict[str, Any],
        *,
        referer: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = dict(self._headers)
        if referer:
            headers["Referer"] = referer
        body = {"operationName": operation_name, "query": query, "variables": variables}
        try:
            resp = self._client.post(self._settings.graphql_url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransientError(f"GraphQL 타임아웃: {operation_name}") from exc
        except httpx.HTTPError as exc:
            raise TransientError(f"GraphQL 호출 오류: {operation_name}: {exc}") from exc

        payload = self._decode(resp, operation_name)
        data = payload.get("data")
        errors = payload.get("errors") or []
        if data is None and errors:
            messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
            raise PermanentError(f"GraphQL 오류 ({operation_name}): {messages}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PermanentError(f"GraphQL data 형식 오류 ({operation_name})")
        return data

    def get_json(self, url: str) -> Dict[str, Any]:
        headers = {k: v for k, v in self._headers.items() if k != "Content-Type"}
        try:
            resp = self._client.get(url, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransientError(f"GET 타임아웃: {url}") from exc
        except httpx.HTTPError as exc:
            raise TransientError(f"GET 호출 오류: {url}: {exc}") from exc
        return self._decode(resp, url)

    @staticmethod
    def _decode(resp: httpx.Response, label: str) -> Dict[str, Any]:
        if resp.status_code in (429,) or resp.status_code >= 500:
            raise TransientError(f"일시 오류 ({label}): {resp.status_code}")
        if resp.status_code >= 400:
            raise PermanentError(f"요청 오류 ({label}): {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise PermanentError(f"JSON 응답이 아닙니다 ({label})") from exc
        if not isinstance(payload, dict):
            raise PermanentError(f"객체 형태의 응답이 아닙니다 ({label})")
        return payload


ItemT = TypeVar("ItemT")


@dataclass
class Page(Generic[ItemT]):
    items: List[ItemT] = field(default_factory=list)
    has_next: bool = False


class PaginatedCollector(ABC, Generic[ItemT]):
    """Cursor-driven listing loop shared by the topic collectors.

    The cursor starts at ``start_cursor`` and advances by ``page_size`` after
    every page, whether or not any of its items passed ``_accept``. The loop
    ends when the upstream reports no next page or when ``cap`` items were
    collected. Transient errors are retried on the same page up to
    ``max_attempts``; anything else aborts with ``CollectionError``.
    """

    start_cursor: int = 0
    name: str = "collect"

    def __init__(
        self,
        *,
        page_size: int,
        throttle: Throttle,
        cap: Optional[int] = None,
        max_attempts: int = 1,
    ) -> None:
        self.page_size = page_size
        self.cap = cap or None
        self.max_attempts = max(1, max_attempts)
        self._throttle = throttle
        self.cursors: List[int] = []

    def collect(self) -> List[ItemT]:
        cursor = self.start_cursor
        collected: List[ItemT] = []
        self.cursors = []
        while True:
            self.cursors.append(cursor)
            page = self._fetch_with_retry(cursor)
            for item in page.items:
                if self.cap is not None and len(collected) >= self.cap:
                    break
                if self._accept(item):
                    collected.append(item)
            logger.info(
                f"{self.name}.page",
                extra={"cursor": cursor, "page_items": len(page.items), "collected": len(collected)},
            )
            if self.cap is not None and len(collected) >= self.cap:
                break
            if not page.has_next:
                break
            cursor += self.page_size
        return collected

    def _fetch_with_retry(self, cursor: int) -> Page[ItemT]:
        attempts = 0
        while True:
            attempts += 1
            self._throttle.wait()
            try:
                return self._fetch_page(cursor)
            except TransientError as exc:
                logger.warning(
                    f"{self.name}.retry",
                    extra={"cursor": cursor, "attempt": attempts, "error": str(exc)},
                )
                if attempts >= self.max_attempts:
                    raise CollectionError(f"목록 수집 실패 (cursor={cursor}): {exc}") from exc
            except ConnectorError as exc:
                raise CollectionError(f"목록 수집 실패 (cursor={cursor}): {exc}") from exc

    @abstractmethod
    def _fetch_page(self, cursor: int) -> Page[ItemT]:
        """Return the candidates at ``cursor`` and the continuation flag."""

    def _accept(self, item: ItemT) -> bool:
        return True
