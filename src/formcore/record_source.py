"""
Remote record source used to load records for edit mode.

Wraps an httpx client: ``GET {base_url}{fetch_path}?id=<id>`` must answer
with a 2xx status and a JSON object mapping field names to values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .config import FormConfig
from .errors import ErrorCode, FetchError, FETCH_FAILED_MESSAGE, map_exception

logger = logging.getLogger(__name__)

USER_AGENT = "RecordForm-FormAssistant/1.0"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one record fetch: the record on success, the error otherwise."""

    record_id: str
    record: dict[str, Any] | None = None
    error: FetchError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, record_id: str, record: dict[str, Any]) -> FetchResult:
        return cls(record_id=record_id, record=record)

    @classmethod
    def failed(cls, record_id: str, error: FetchError) -> FetchResult:
        return cls(record_id=record_id, error=error)


class RecordSource:
    """Thin wrapper around httpx for fetching one record by identifier."""

    def __init__(self, config: FormConfig, transport: httpx.BaseTransport | None = None) -> None:
        self._config = config
        self._client = httpx.Client(
            timeout=httpx.Timeout(config.request_timeout),
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    def fetch(self, record_id: str) -> FetchResult:
        """
        Fetch a record, never raising.

        Network errors, non-success statuses and bodies that are not JSON
        objects are all reported as a failed FetchResult.
        """
        url = self._config.fetch_url(record_id)
        logger.info(f"Fetching record {record_id} from {url}")

        try:
            response = self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.warning(f"Failed to fetch record {record_id}: {type(e).__name__}: {e}")
            error = map_exception(e, {"record_id": record_id, "url": url})
            if not isinstance(error, FetchError):
                error = FetchError(
                    code=ErrorCode.INVALID_RESPONSE,
                    user_message=FETCH_FAILED_MESSAGE,
                    technical_message=error.technical_message,
                    context={"url": url},
                )
            error.context["record_id"] = record_id
            return FetchResult.failed(record_id, error)

        if not isinstance(payload, dict):
            logger.warning(f"Record {record_id} response is not a JSON object")
            return FetchResult.failed(
                record_id,
                FetchError(
                    code=ErrorCode.INVALID_RESPONSE,
                    user_message=FETCH_FAILED_MESSAGE,
                    record_id=record_id,
                    technical_message=f"Expected a JSON object, got {type(payload).__name__}",
                ),
            )

        return FetchResult.ok(record_id, payload)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
