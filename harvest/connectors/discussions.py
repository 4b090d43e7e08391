"""Contest discussion topics and their comment threads."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from harvest.models.domain import (
    Comment,
    CommentListing,
    CommentPage,
    DiscussionListing,
    Topic,
    parse_response,
)
from harvest.services.deduplicator import InMemoryKeyStore, KeyStore, claim
from harvest.settings import Settings

from .base import ConnectorError, DetailFetchError, Page, PaginatedCollector, Throttle, Transport


logger = logging.getLogger(__name__)

USER_DISCUSSIONS_QUERY = """
query getUserDiscussTopics($orderBy: ArticleOrderByEnum, $username: String!, $skip: Int, $first: Int) {
  ugcArticleUserDiscussionArticles(
    orderBy: $orderBy
    username: $username
    skip: $skip
    first: $first
  ) {
    pageInfo {
      hasNextPage
    }
    edges {
      node {
        topicId
        title
        slug
        createdAt
      }
    }
  }
}
"""

COMMENT_QUERY = """
query questionDiscussComments($topicId: Int!, $orderBy: String = "newest_to_oldest", $pageNo: Int = 1, $numPerPage: Int = 20) {
  topicComments(topicId: $topicId, orderBy: $orderBy, pageNo: $pageNo, numPerPage: $numPerPage) {
    data {
      post {
        id
        content
        creationDate
        author {
          username
        }
      }
    }
    totalNum
  }
}
"""


class ContestTopicCollector(PaginatedCollector[Topic]):
    """Pages through an account's discussion articles with a skip/first cursor.

    Only slugs matching the configured pattern are kept, and each topic id is
    kept at most once.
    """

    name = "discussions.collect"
    start_cursor = 0

    def __init__(
        self,
        transport: Transport,
        settings: Settings,
        throttle: Throttle,
        keystore: Optional[KeyStore] = None,
    ) -> None:
        super().__init__(
            page_size=int(settings.discussion_page_size),
            throttle=throttle,
            max_attempts=int(settings.collect_max_attempts),
        )
        self._transport = transport
        self._username = settings.discussion_username
        self._pattern = re.compile(settings.discussion_slug_pattern)
        self._keystore = keystore or InMemoryKeyStore()

    def _fetch_page(self, cursor: int) -> Page[Topic]:
        data = self._transport.post_graphql(
            "getUserDiscussTopics",
            USER_DISCUSSIONS_QUERY,
            {
                "username": self._username,
                "orderBy": "MOST_RECENT",
                "skip": cursor,
                "first": self.page_size,
            },
        )
        listing = parse_response(DiscussionListing, data)
        if listing.articles is None:
            return Page(items=[], has_next=False)
        topics = [
            Topic(
                topic_id=edge.node.topic_id,
                title=edge.node.title,
                slug=edge.node.slug,
                created_at=edge.node.created_at,
            )
            for edge in listing.articles.edges
        ]
        return Page(items=topics, has_next=listing.articles.page_info.has_next_page)

    def _accept(self, item: Topic) -> bool:
        if not self._pattern.search(item.slug):
            return False
        if not claim(self._keystore, str(item.topic_id)):
            logger.info("discussions.collect.duplicate", extra={"topic_id": item.topic_id, "slug": item.slug})
            return False
        return True


class CommentFetcher:
    """Fetches every comment of a topic, one numbered page at a time.

    A page shorter than ``page_size`` is taken as the last one, so a thread
    whose size is an exact multiple of the page size costs one extra, empty
    request.
    """

    def __init__(self, transport: Transport, settings: Settings, throttle: Throttle) -> None:
        self._transport = transport
        self._throttle = throttle
        self.page_size = int(settings.comment_page_size)
        self._discuss_base = settings.referer.rstrip("/")

    def fetch_all(self, topic: Topic) -> CommentPage:
        comments: List[Comment] = []
        total_expected: Optional[int] = None
        page_no = 1
        while True:
            self._throttle.wait()
            try:
                data = self._transport.post_graphql(
                    "questionDiscussComments",
                    COMMENT_QUERY,
                    {"topicId": topic.topic_id, "pageNo": page_no, "numPerPage": self.page_size},
                    referer=f"{self._discuss_base}/{topic.slug}",
                )
                listing = parse_response(CommentListing, data)
            except ConnectorError as exc:
                raise DetailFetchError(topic.slug, f"댓글 페이지 {page_no} 요청 실패: {exc}") from exc

            page_items = listing.topic_comments.data if listing.topic_comments else []
            if total_expected is None and listing.topic_comments is not None:
                total_expected = listing.topic_comments.total_num
            for item in page_items:
                comments.append(_to_comment(item.post))
            if len(page_items) < self.page_size:
                break
            page_no += 1

        if total_expected is not None and total_expected != len(comments):
            logger.warning(
                "discussions.comments.count_mismatch",
                extra={"slug": topic.slug, "expected": total_expected, "fetched": len(comments)},
            )
        return CommentPage(comments=comments, total_expected=total_expected, requests=page_no)


def _to_comment(post) -> Comment:
    if post is None:
        return Comment()
    author = post.author.username if post.author and post.author.username else "anonymous"
    return Comment(author=author, content=post.content, created_at=post.creation_date)
