"""Run coordinator — runs every configured adapter and aggregates the totals."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Sequence

from redactor.ingestion.adapter import SourceAdapter
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.pipeline import AdapterRunResult, PipelineRunner
from redactor.storage.articles import ArticleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    """Aggregate of one coordinator run across all adapters."""

    results: tuple[AdapterRunResult, ...] = ()
    duration_seconds: float = 0.0
    error: str | None = None
    totals: dict[str, int] = field(init=False)

    def __post_init__(self) -> None:
        totals = {key: 0 for key in ("processed", "inserted", "duplicates", "failed", "degraded")}
        for result in self.results:
            for key in totals:
                totals[key] += getattr(result, key)
        object.__setattr__(self, "totals", totals)

    @property
    def processed(self) -> int:
        return self.totals["processed"]

    @property
    def inserted(self) -> int:
        return self.totals["inserted"]

    @property
    def duplicates(self) -> int:
        return self.totals["duplicates"]

    @property
    def failed(self) -> int:
        return self.totals["failed"]

    @property
    def failed_adapters(self) -> list[str]:
        return [r.adapter for r in self.results if r.aborted]

    def to_dict(self) -> dict:
        return {
            **self.totals,
            "duration_seconds": self.duration_seconds,
            "failed_adapters": self.failed_adapters,
            "error": self.error,
            "adapters": [r.to_dict() for r in self.results],
        }


class RunCoordinator:
    """Drives a fixed set of adapters to completion.

    Adapters run one after another unless ``max_workers > 1``, in which case
    up to that many run at once on a thread pool. Every adapter run has its
    own failure boundary and its own store connection, so ``run_all`` always
    returns a summary.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        database_path: str,
        fetcher: RateLimitedFetcher,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._adapters = list(adapters)
        self._database_path = database_path
        self._fetcher = fetcher
        self._max_workers = max_workers

    def run_all(self) -> RunSummary:
        started = time.monotonic()
        logger.info("Starting all scrapers (%d adapters)", len(self._adapters))
        results: list[AdapterRunResult] = []
        error = None
        try:
            if self._max_workers == 1 or len(self._adapters) <= 1:
                results = [self._run_one(adapter) for adapter in self._adapters]
            else:
                with ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="adapter"
                ) as pool:
                    results = list(pool.map(self._run_one, self._adapters))
        except Exception as exc:
            logger.exception("Scraper run failed")
            error = f"{type(exc).__name__}: {exc}"

        summary = RunSummary(
            results=tuple(results),
            duration_seconds=round(time.monotonic() - started, 3),
            error=error,
        )
        logger.info(
            "All scrapers finished in %.2fs: %d processed, %d inserted, %d duplicates, "
            "%d failed, %d adapter(s) aborted",
            summary.duration_seconds, summary.processed, summary.inserted,
            summary.duplicates, summary.failed, len(summary.failed_adapters),
        )
        return summary

    def _run_one(self, adapter: SourceAdapter) -> AdapterRunResult:
        started = time.monotonic()
        try:
            with ArticleStore.open(self._database_path) as store:
                return PipelineRunner(adapter, store, self._fetcher).run()
        except Exception as exc:
            logger.exception("Adapter %s crashed", getattr(adapter, "name", adapter))
            return AdapterRunResult(
                adapter=str(getattr(adapter, "name", adapter)),
                source_id=int(getattr(adapter, "source_id", 0)),
                aborted=True,
                error=f"{type(exc).__name__}: {exc}",
                duration_seconds=round(time.monotonic() - started, 3),
            )
