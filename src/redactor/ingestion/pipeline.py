"""Pipeline runner — drives one adapter through pagination, detail, dedup and persist."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import asdict, dataclass

from redactor.ingestion.adapter import SourceAdapter
from redactor.ingestion.errors import PersistenceError, TransportError
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.models import ArticleStub
from redactor.storage.articles import ArticleStore, UpsertResult

logger = logging.getLogger(__name__)


class RunState(str, enum.Enum):
    START = "start"
    FETCHING_PAGE = "fetching_page"
    PROCESSING_ITEM = "processing_item"
    DONE = "done"


class ItemOutcome(str, enum.Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class AdapterRunResult:
    """Counts and timing for one adapter run."""

    adapter: str
    source_id: int
    processed: int = 0
    inserted: int = 0
    duplicates: int = 0
    failed: int = 0
    degraded: int = 0  # persisted with the content-unavailable sentinel
    pages: int = 0
    aborted: bool = False
    error: str | None = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


class PipelineRunner:
    """Runs one adapter to completion: Start → FetchingPage → ProcessingItem → Done.

    A transport failure while listing ends this adapter's run early. A
    failure on a single item is counted and the loop moves on to the next
    stub; it never aborts the page. Listing items the adapter could not
    read (``Page.rejected``) count as processed and failed.
    """

    def __init__(
        self,
        adapter: SourceAdapter,
        store: ArticleStore,
        fetcher: RateLimitedFetcher,
    ) -> None:
        self.adapter = adapter
        self._store = store
        self._fetcher = fetcher
        self.state = RunState.START
        self._counts = {
            "processed": 0, "inserted": 0, "duplicates": 0,
            "failed": 0, "degraded": 0, "pages": 0,
        }

    def run(self) -> AdapterRunResult:
        started = time.monotonic()
        adapter = self.adapter
        aborted = False
        error = None

        logger.info("Starting adapter %s", adapter.name)
        cursor = adapter.initial_cursor()
        while True:
            self.state = RunState.FETCHING_PAGE
            try:
                page = adapter.list_page(cursor)
            except TransportError as exc:
                logger.error("%s: listing failed at cursor %s: %s", adapter.name, cursor, exc)
                aborted, error = True, str(exc)
                break
            except Exception as exc:
                logger.exception("%s: unexpected listing error at cursor %s", adapter.name, cursor)
                aborted, error = True, f"{type(exc).__name__}: {exc}"
                break
            self._counts["pages"] += 1
            if page.rejected:
                logger.warning(
                    "%s: %d listing item(s) at cursor %s could not be read",
                    adapter.name, page.rejected, cursor,
                )
                self._counts["processed"] += page.rejected
                self._counts["failed"] += page.rejected

            for index, stub in enumerate(page.stubs, start=1):
                self.state = RunState.PROCESSING_ITEM
                logger.debug(
                    "%s: processing item %d/%d (%s)",
                    adapter.name, index, len(page.stubs), stub.url,
                )
                self._process(stub)
                self._fetcher.pause(adapter.delay)

            if not page.has_more or self._counts["pages"] >= adapter.paging.max_pages:
                break
            cursor = page.next_cursor

        self.state = RunState.DONE
        result = AdapterRunResult(
            adapter=adapter.name,
            source_id=adapter.source_id,
            aborted=aborted,
            error=error,
            duration_seconds=round(time.monotonic() - started, 3),
            **self._counts,
        )
        logger.info(
            "Adapter %s done: %d processed, %d inserted, %d duplicates, %d failed "
            "in %.2fs%s",
            result.adapter, result.processed, result.inserted, result.duplicates,
            result.failed, result.duration_seconds, " (aborted)" if aborted else "",
        )
        return result

    def _process(self, stub: ArticleStub) -> ItemOutcome:
        adapter = self.adapter
        self._counts["processed"] += 1
        try:
            article = adapter.fetch_detail(stub)
        except Exception:
            logger.warning("%s: could not build article for %s", adapter.name, stub.url, exc_info=True)
            self._counts["failed"] += 1
            return ItemOutcome.FAILED

        if article.extraction_failed:
            if not adapter.keep_failed_extractions:
                logger.warning("%s: skipped %s (content unavailable)", adapter.name, stub.url)
                self._counts["failed"] += 1
                return ItemOutcome.FAILED
            self._counts["degraded"] += 1

        try:
            outcome = self._store.upsert(article)
        except PersistenceError as exc:
            logger.error("%s: %s", adapter.name, exc)
            self._counts["failed"] += 1
            return ItemOutcome.FAILED

        if outcome is UpsertResult.DUPLICATE:
            self._counts["duplicates"] += 1
            logger.info("%s: duplicate %s", adapter.name, article.url)
            return ItemOutcome.DUPLICATE
        self._counts["inserted"] += 1
        logger.info("%s: saved %s", adapter.name, article.title)
        return ItemOutcome.INSERTED
