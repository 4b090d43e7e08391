"""Contest discussion pipeline: topics, then comments, one dump per topic."""

from __future__ import annotations

import uuid
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from harvest.connectors.base import DetailFetchError, LeetCodeClient, SinkError, SleepFn, Throttle, Transport
from harvest.connectors.discussions import CommentFetcher, ContestTopicCollector
from harvest.services.sink import write_topic_dump
from harvest.settings import Settings, get_settings
from harvest.utils.logging import get_logger


@dataclass
class DiscussionRunSummary:
    topics: int = 0
    comments: int = 0
    written: List[Path] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def run_contest_discussions(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[Transport] = None,
    sleep: Optional[SleepFn] = None,
) -> DiscussionRunSummary:
    """Collect contest topics and write each topic's comments as soon as they arrive.

    A ``CollectionError`` from the topic listing propagates; comment and write
    failures are recorded in the summary and the loop moves on.
    """
    cfg = settings or get_settings()
    logger = get_logger(__name__)
    trace_id = str(uuid.uuid4())
    output_dir = Path(cfg.output_dir)
    throttle = Throttle(cfg.discussion_delay_seconds, sleep=sleep)
    summary = DiscussionRunSummary()

    with ExitStack() as stack:
        if transport is None:
            transport = stack.enter_context(LeetCodeClient(cfg))

        logger.info("discussions.start", extra={"trace_id": trace_id, "username": cfg.discussion_username})
        topics = ContestTopicCollector(transport, cfg, throttle).collect()
        summary.topics = len(topics)
        logger.info("discussions.collected", extra={"trace_id": trace_id, "topics": len(topics)})

        fetcher = CommentFetcher(transport, cfg, throttle)
        for topic in topics:
            logger.info("discussions.topic.start", extra={"trace_id": trace_id, "slug": topic.slug})
            try:
                page = fetcher.fetch_all(topic)
            except DetailFetchError as exc:
                logger.error("discussions.topic.failed", extra={"trace_id": trace_id, "slug": topic.slug, "error": str(exc)})
                summary.failed.append(topic.slug)
                continue
            try:
                path = write_topic_dump(output_dir, topic, page.comments)
            except SinkError as exc:
                logger.error("discussions.write.failed", extra={"trace_id": trace_id, "path": exc.path, "error": str(exc)})
                summary.failed.append(topic.slug)
                continue
            summary.comments += len(page.comments)
            summary.written.append(path)
            logger.info(
                "discussions.topic.saved",
                extra={"trace_id": trace_id, "slug": topic.slug, "comments": len(page.comments), "path": str(path)},
            )

    logger.info(
        "discussions.done",
        extra={
            "trace_id": trace_id,
            "topics": summary.topics,
            "written": len(summary.written),
            "failed": len(summary.failed),
        },
    )
    return summary
