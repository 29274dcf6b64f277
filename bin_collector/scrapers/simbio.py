"""
bin_collector/scrapers/simbio.py
═══════════════════════════════════════════════════════════════════════════════
Simbio "moj dan odvoza odpadkov" endpoint - the only upstream.

One POST per attempt:
  POST {SIMBIO_URL}
  action=simbioOdvozOdpadkov&query={address}     (form-encoded)

Response is a JSON array of schedule records:
  [{"id": "1", "name": "...", "query": "...", "city": "...",
    "next_mko": "2024-01-05", "next_emb": "2024-01-03", "next_bio": "2024-01-07"}]

fetch() never touches shared state. It returns a ScheduleSnapshot or raises a
FetchError subclass; retrying and caching is the scheduler's job.
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional, Sequence

import httpx

from bin_collector.core.config import (
    ADDRESS, CATEGORIES, REQUEST_TIMEOUT_S, SIMBIO_ACTION, SIMBIO_URL,
)
from bin_collector.core.http_client import plain_client, request_timeout
from bin_collector.errors import (
    EmptyResult, FetchTimeout, ParseError, UpstreamError, UpstreamUnreachable,
)

log = logging.getLogger("simbio")

RECORD_FIELDS = ("id", "name", "query", "city", "next_mko", "next_emb", "next_bio")


@dataclass(frozen=True)
class ScheduleRecord:
    """One entry of the upstream response. Only lives while parsing."""
    id:       str = ""
    name:     str = ""
    query:    str = ""
    city:     str = ""
    next_mko: str = ""
    next_emb: str = ""
    next_bio: str = ""


@dataclass(frozen=True)
class ScheduleSnapshot:
    """Display- and API-ready projection of one ScheduleRecord."""
    name:     str = ""
    query:    str = ""
    city:     str = ""
    mko_name: str = ""
    mko_date: str = ""
    emb_name: str = ""
    emb_date: str = ""
    bio_name: str = ""
    bio_date: str = ""

    def as_dict(self) -> dict[str, str]:
        return asdict(self)

    def categories(self) -> list[tuple[str, str]]:
        """(label, date) pairs in display order; the default snapshot gets the fixed labels."""
        return [
            (getattr(self, f"{key}_name") or label, getattr(self, f"{key}_date"))
            for key, (_, label) in CATEGORIES.items()
        ]


RecordSelector = Callable[[Sequence[ScheduleRecord]], ScheduleRecord]


# ── Parsing ───────────────────────────────────────────────────────────────────

def _parse_record(idx: int, raw: Any) -> ScheduleRecord:
    if not isinstance(raw, dict):
        raise ParseError(f"entry {idx} is {type(raw).__name__}, expected object")
    values = {}
    for field in RECORD_FIELDS:
        v = raw.get(field)
        if v is None:
            v = ""
        elif not isinstance(v, str):
            raise ParseError(f"entry {idx}: field '{field}' is {type(v).__name__}, expected string")
        values[field] = v
    return ScheduleRecord(**values)


def parse_records(payload: Any) -> list[ScheduleRecord]:
    """Validate the decoded JSON body. Unknown keys are ignored."""
    if not isinstance(payload, list):
        raise ParseError(f"expected a JSON array, got {type(payload).__name__}")
    return [_parse_record(i, raw) for i, raw in enumerate(payload)]


def first_record(records: Sequence[ScheduleRecord]) -> ScheduleRecord:
    """
    Default selection policy: Simbio is expected to return exactly one record
    for a full street address, so the first one wins. Pass a different
    selector to SimbioFetcher when the query can match several addresses.
    """
    return records[0]


def to_snapshot(record: ScheduleRecord) -> ScheduleSnapshot:
    labelled = {}
    for key, (field, label) in CATEGORIES.items():
        labelled[f"{key}_name"] = label
        labelled[f"{key}_date"] = getattr(record, field)
    return ScheduleSnapshot(name=record.name, query=record.query, city=record.city, **labelled)


# ── Fetcher ───────────────────────────────────────────────────────────────────

class SimbioFetcher:
    """Performs one upstream call per fetch() and projects the result."""

    def __init__(
        self,
        address: str = ADDRESS,
        *,
        url: str = SIMBIO_URL,
        timeout_s: float = REQUEST_TIMEOUT_S,
        client: Optional[httpx.AsyncClient] = None,
        selector: RecordSelector = first_record,
    ):
        self.address   = address
        self.url       = url
        self.timeout_s = timeout_s
        self.selector  = selector
        self._client   = client

    def _get_client(self) -> httpx.AsyncClient:
        return self._client if self._client is not None else plain_client()

    async def fetch(self) -> ScheduleSnapshot:
        client = self._get_client()
        form = {"action": SIMBIO_ACTION, "query": self.address}
        # httpx timeouts restart per chunk; wait_for caps the whole call
        try:
            resp = await asyncio.wait_for(
                client.post(self.url, data=form, timeout=request_timeout(self.timeout_s)),
                self.timeout_s,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as ex:
            raise FetchTimeout(self.timeout_s) from ex
        except httpx.DecodingError as ex:
            raise ParseError(f"failed to decode response body: {ex}") from ex
        except httpx.RequestError as ex:
            raise UpstreamUnreachable(f"failed to perform request: {ex}") from ex

        if resp.status_code != 200:
            raise UpstreamError(resp.status_code)

        try:
            payload = resp.json()
        except ValueError as ex:
            raise ParseError(f"failed to parse JSON response: {ex}") from ex

        records = parse_records(payload)
        if not records:
            raise EmptyResult()
        if len(records) > 1:
            log.debug(f"{len(records)} records for '{self.address}' - applying selector")

        return to_snapshot(self.selector(records))
