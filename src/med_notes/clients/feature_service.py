"""HTTP client for the canonical feature registry (PostgREST-style RPC)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import httpx

from med_notes.clients.config import FeatureServiceConfig
from med_notes.core.exceptions import AttachFailed, LookupUnavailable
from med_notes.core.types import (
    CanonicalFeature,
    EntityStats,
    FeatureAttachment,
    Suggestion,
)

logger = logging.getLogger(__name__)


class FeatureServiceClient:
    """FeatureLookup, EntityWriter and StatsLookup over HTTP.

    Lookups go through ``/rest/v1/rpc/<function>``; attaching upserts a
    row into the link table. Transport errors, timeouts and non-2xx
    responses become LookupUnavailable (reads) or AttachFailed (writes).
    """

    def __init__(
        self,
        config: FeatureServiceConfig | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or FeatureServiceConfig()
        if base_url is not None:
            self._config.base_url = base_url
        if api_key is not None:
            self._config.api_key = api_key

        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> FeatureServiceClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _rpc(self, function: str, params: dict[str, Any]) -> Any:
        try:
            response = await self._client.post(f"/rest/v1/rpc/{function}", json=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise LookupUnavailable(
                function,
                f"{function} returned HTTP {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise LookupUnavailable(function, f"{function} failed: {exc!r}") from exc
        except ValueError as exc:
            raise LookupUnavailable(function, f"{function} returned invalid JSON") from exc

    async def lookup_suggestions(self, term: str, limit: int) -> list[Suggestion]:
        function = self._config.search_rpc
        rows = await self._rpc(function, {"search_term": term, "limit_count": limit})
        with _malformed_rows(function):
            return [Suggestion.from_row(row) for row in rows or []]

    async def lookup_canonical(self, text: str) -> CanonicalFeature | None:
        function = self._config.canonicalize_rpc
        rows = await self._rpc(function, {"input_text": text})
        with _malformed_rows(function):
            first = _first_row(rows)
            if first is None or first.get("feature_id", first.get("id")) is None:
                return None
            return CanonicalFeature.from_row(first)

    async def lookup_entity_stats(self, entity_id: str) -> EntityStats | None:
        function = self._config.stats_rpc
        rows = await self._rpc(function, {"disease_id": entity_id})
        with _malformed_rows(function):
            first = _first_row(rows)
            if first is None:
                return None
            return EntityStats.from_row(entity_id, first)

    async def attach_feature(
        self,
        entity_id: str,
        feature_id: str,
        attachment: FeatureAttachment,
    ) -> dict[str, Any]:
        body = {
            "disease_id": entity_id,
            "feature_id": feature_id,
            "is_present": attachment.is_present,
            "value_text": attachment.value_text or None,
        }
        try:
            response = await self._client.post(
                f"/rest/v1/{self._config.attach_table}",
                json=body,
                headers={"Prefer": "resolution=merge-duplicates,return=representation"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AttachFailed(
                entity_id,
                feature_id,
                f"Attach returned HTTP {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise AttachFailed(entity_id, feature_id, f"Attach failed: {exc!r}") from exc

        logger.debug("Attached %s to %s", feature_id, entity_id)
        try:
            record = _first_row(response.json() if response.content else None)
        except ValueError:
            # The write went through; only the echoed row is unreadable
            logger.warning("Attach of %s to %s returned a non-JSON body", feature_id, entity_id)
            record = None
        return record or body


def _first_row(rows: Any) -> dict[str, Any] | None:
    """RPCs return a list of rows; single-row functions use the first."""
    if isinstance(rows, list):
        return rows[0] if rows else None
    if isinstance(rows, dict):
        return rows
    return None


@contextmanager
def _malformed_rows(function: str) -> Iterator[None]:
    """Rows that do not fit the expected shape count as an unusable answer."""
    try:
        yield
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise LookupUnavailable(function, f"{function} returned malformed rows: {exc!r}") from exc
