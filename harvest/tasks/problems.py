"""Problem pipeline: slug index, per-problem detail, then JSON/CSV/failure log."""

from __future__ import annotations

import uuid
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from harvest.connectors.base import LeetCodeClient, SinkError, SleepFn, Throttle, Transport
from harvest.connectors.problems import ProblemFetcher, ProblemSlugCollector
from harvest.models.domain import Failed, FetchOutcome, ProblemDetail, Skipped, Success
from harvest.services.sink import write_failures, write_problem_csv, write_problems_json
from harvest.settings import Settings, get_settings
from harvest.utils.logging import get_logger

PREVIEW_COUNT = 3


@dataclass
class ProblemRunSummary:
    collected: int = 0
    problems: List[ProblemDetail] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    sink_errors: List[str] = field(default_factory=list)


def run_problems(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[Transport] = None,
    sleep: Optional[SleepFn] = None,
) -> ProblemRunSummary:
    """Crawl every problem in the index and write the accumulated results once."""
    cfg = settings or get_settings()
    logger = get_logger(__name__)
    trace_id = str(uuid.uuid4())
    throttle = Throttle(cfg.problem_delay_seconds, sleep=sleep)
    summary = ProblemRunSummary()

    with ExitStack() as stack:
        if transport is None:
            transport = stack.enter_context(LeetCodeClient(cfg))

        logger.info("problems.start", extra={"trace_id": trace_id, "limit": cfg.problem_limit})
        stubs = ProblemSlugCollector(transport, cfg, throttle).collect()
        summary.collected = len(stubs)
        logger.info(
            "problems.collected",
            extra={"trace_id": trace_id, "slugs": len(stubs), "first": [s.slug for s in stubs[:5]]},
        )

        fetcher = ProblemFetcher(transport, cfg, throttle)
        for stub in stubs:
            _record(summary, fetcher.fetch_one(stub.slug))

    logger.info(
        "problems.scraped",
        extra={
            "trace_id": trace_id,
            "problems": len(summary.problems),
            "skipped": len(summary.skipped),
            "failed": len(summary.failed),
        },
    )
    _log_preview(logger, summary.problems)
    _write_outputs(cfg, summary, logger, trace_id)
    return summary


def _record(summary: ProblemRunSummary, outcome: FetchOutcome) -> None:
    if isinstance(outcome, Success):
        summary.problems.append(outcome.record)
    elif isinstance(outcome, Skipped):
        summary.skipped.append(outcome.identifier)
    elif isinstance(outcome, Failed):
        summary.failed.append(outcome.identifier)


def _log_preview(logger, problems: Sequence[ProblemDetail]) -> None:
    for problem in problems[:PREVIEW_COUNT]:
        first_line = problem.sample_test_case.split("\n")[0]
        logger.info(
            "problems.preview",
            extra={
                "slug": problem.slug,
                "title": problem.title,
                "difficulty": problem.difficulty,
                "sample": f"{first_line}…",
            },
        )


def _write_outputs(cfg: Settings, summary: ProblemRunSummary, logger, trace_id: str) -> None:
    root = Path(cfg.output_dir)
    artifacts: List[tuple[Path, Callable[[Path], Path]]] = []
    if summary.problems:
        artifacts.append((root / cfg.problems_json, lambda p: write_problems_json(p, summary.problems)))
        artifacts.append((root / cfg.problems_csv, lambda p: write_problem_csv(p, summary.problems)))
    else:
        logger.warning("problems.empty", extra={"trace_id": trace_id})
    if summary.failed:
        artifacts.append((root / cfg.failed_log, lambda p: write_failures(p, summary.failed)))

    for path, writer in artifacts:
        try:
            written = writer(path)
        except SinkError as exc:
            logger.error("problems.write.failed", extra={"trace_id": trace_id, "path": exc.path, "error": str(exc)})
            summary.sink_errors.append(exc.path)
            continue
        summary.written.append(written)
        logger.info("problems.write.saved", extra={"trace_id": trace_id, "path": str(written)})
