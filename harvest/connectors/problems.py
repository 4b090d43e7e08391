"""Problem slug index and per-problem detail fetcher."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from harvest.models.domain import (
    Failed,
    FetchOutcome,
    ProblemDetail,
    ProblemIndex,
    ProblemStub,
    QuestionNode,
    QuestionResponse,
    Skipped,
    Success,
    parse_response,
)
from harvest.services.deduplicator import InMemoryKeyStore, KeyStore, claim
from harvest.settings import Settings

from .base import ConnectorError, Page, PaginatedCollector, Throttle, Transport


logger = logging.getLogger(__name__)

QUESTION_QUERY = """
query getQuestion($titleSlug: String!) {
  question(titleSlug: $titleSlug) {
    title
    content
    difficulty
    sampleTestCase
    codeSnippets { lang code }
    topicTags { name }
  }
}
"""

SKIP_UNAVAILABLE = "unavailable"
SKIP_EXCLUDED_TAG = "excluded_tag"
SKIP_EMPTY_DESCRIPTION = "empty_description"


class ProblemSlugCollector(PaginatedCollector[ProblemStub]):
    """Reads the problem index, capped at ``problem_limit`` slugs.

    The REST index returns the whole catalogue in one response, so the
    listing is a single page with no continuation.
    """

    name = "problems.collect"
    start_cursor = 0

    def __init__(
        self,
        transport: Transport,
        settings: Settings,
        throttle: Throttle,
        keystore: Optional[KeyStore] = None,
    ) -> None:
        super().__init__(
            page_size=1,
            throttle=throttle,
            cap=int(settings.problem_limit),
            max_attempts=int(settings.collect_max_attempts),
        )
        self._transport = transport
        self._url = settings.problems_url
        self._keystore = keystore or InMemoryKeyStore()

    def _fetch_page(self, cursor: int) -> Page[ProblemStub]:
        index = parse_response(ProblemIndex, self._transport.get_json(self._url))
        stubs = [ProblemStub(slug=pair.stat.question_title_slug) for pair in index.stat_status_pairs]
        return Page(items=stubs, has_next=False)

    def _accept(self, item: ProblemStub) -> bool:
        if not claim(self._keystore, item.slug):
            logger.info("problems.collect.duplicate", extra={"slug": item.slug})
            return False
        return True


class ProblemFetcher:
    """Single-shot detail fetch that turns every response into a ``FetchOutcome``."""

    def __init__(self, transport: Transport, settings: Settings, throttle: Throttle) -> None:
        self._transport = transport
        self._throttle = throttle
        self._excluded_tags = set(settings.excluded_tags)

    def fetch_one(self, slug: str) -> FetchOutcome:
        self._throttle.wait()
        try:
            data = self._transport.post_graphql("getQuestion", QUESTION_QUERY, {"titleSlug": slug})
            response = parse_response(QuestionResponse, data)
        except ConnectorError as exc:
            logger.error("problems.fetch.failed", extra={"slug": slug, "error": str(exc)})
            return Failed(identifier=slug, error=str(exc))

        node = response.question
        if node is None:
            return Skipped(identifier=slug, reason=SKIP_UNAVAILABLE)
        return self._classify(slug, node)

    def _classify(self, slug: str, node: QuestionNode) -> FetchOutcome:
        tags = [t.name for t in (node.topic_tags or [])]
        if len(tags) == 1 and tags[0] in self._excluded_tags:
            return Skipped(identifier=slug, reason=SKIP_EXCLUDED_TAG)

        html = node.content or ""
        if not html.strip():
            return Skipped(identifier=slug, reason=SKIP_EMPTY_DESCRIPTION)

        return Success(
            identifier=slug,
            record=ProblemDetail(
                slug=slug,
                title=node.title,
                difficulty=node.difficulty,
                sample_test_case=node.sample_test_case or "",
                tags=tags,
                code_snippets=_flatten_snippets(node),
                description_html=html,
            ),
        )


def _flatten_snippets(node: QuestionNode) -> Dict[str, str]:
    snippets: Dict[str, str] = {}
    for snippet in node.code_snippets or []:
        snippets[snippet.lang] = snippet.code
    return snippets
