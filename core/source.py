"""Remote data source: the spreadsheet-backed Apps Script endpoint.

The endpoint answers with ``{"data": [...]}`` on success, ``{"error": "..."}``
when the script fails, and neither key when the sheet is empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import httpx

from core import settings
from core.data import RecordStore


logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "Tidak ada data yang ditemukan."
LOADING_MESSAGE = "Memuat data, mohon tunggu..."


class DataSourceError(Exception):
    """A load from the data source failed; the previous records stay in place."""


class SourceError(DataSourceError):
    """The source answered with an explicit error payload."""


class TransportError(DataSourceError):
    """The request failed or the response could not be parsed."""


@dataclass(frozen=True)
class LoadOutcome:
    status: str  # "ok" | "empty" | "error"
    message: str = ""
    record_count: int = 0
    error_type: Optional[str] = None
    dismissible: bool = True

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def is_error(self) -> bool:
        return self.status == "error"


def fetch_payload(
    url: Optional[str] = None,
    *,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> Any:
    url = url or settings.SOURCE_URL
    try:
        if client is None:
            # Apps Script answers with a redirect to the rendered content.
            with httpx.Client(timeout=timeout or settings.SOURCE_TIMEOUT, follow_redirects=True) as c:
                response = c.get(url)
        elif timeout is not None:
            response = client.get(url, timeout=timeout)
        else:
            response = client.get(url)
        response.raise_for_status()
        return response.json()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise TransportError(str(exc) or type(exc).__name__) from exc
    except ValueError as exc:
        raise TransportError(f"invalid JSON response ({exc})") from exc


def parse_payload(payload: Any) -> Optional[List[Any]]:
    """Return the record list, or None when the source has no data."""
    if not isinstance(payload, dict):
        raise TransportError(f"unexpected response type {type(payload).__name__}")
    error = payload.get("error")
    if error:
        raise SourceError(str(error))
    data = payload.get("data")
    if data is None:
        return None
    if not isinstance(data, list):
        raise TransportError(f"'data' must be a list, got {type(data).__name__}")
    return data


def fetch_records(
    url: Optional[str] = None,
    *,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> Optional[List[Any]]:
    return parse_payload(fetch_payload(url, client=client, timeout=timeout))


def load_from_source(
    store: RecordStore,
    fetch: Callable[[], Optional[List[Any]]] = fetch_records,
) -> LoadOutcome:
    """Fetch records into ``store``, converting source failures into an outcome.

    A failed or empty fetch leaves the store untouched. An explicit empty
    ``data`` list replaces the store with no records.
    """
    try:
        records = fetch()
    except DataSourceError as exc:
        logger.warning("Loading advising records failed (%s): %s", type(exc).__name__, exc)
        return LoadOutcome(
            status="error",
            message=f"Gagal memuat data: {exc}. Pastikan URL Apps Script benar dan dapat diakses.",
            record_count=len(store),
            error_type=type(exc).__name__,
        )

    if records is None:
        logger.info("Data source returned no data")
        return LoadOutcome(status="empty", message=EMPTY_MESSAGE, record_count=len(store))

    store.load(records)
    if store.empty:
        logger.info("Data source returned an empty record list")
        return LoadOutcome(status="empty", message=EMPTY_MESSAGE, record_count=0)

    logger.info("Loaded %d advising records (version %d)", len(store), store.version)
    return LoadOutcome(status="ok", record_count=len(store))
