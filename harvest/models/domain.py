"""Domain records, upstream response schemas and fetch outcomes.

Records are frozen Pydantic v2 models. Response schemas declare every optional
field explicitly; a missing required field surfaces as ``ParseError`` through
``parse_response``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from harvest.connectors.base import ParseError


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Topic(_Record):
    """A discussion topic found by the listing query."""

    topic_id: int = Field(..., alias="topicId")
    title: str
    slug: str
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("slug")
    @classmethod
    def _slug_not_blank(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("slug는 공백일 수 없습니다.")
        return s


class ProblemStub(_Record):
    """A problem identified only by its title slug."""

    slug: str


class Comment(_Record):
    author: str = "anonymous"
    content: Optional[str] = None
    created_at: Optional[int] = Field(None, alias="createdAt")


class ProblemDetail(_Record):
    """Flattened problem detail as written to the structured dump."""

    slug: str
    title: str
    difficulty: Optional[str] = None
    sample_test_case: str = Field("", alias="sampleTestCase")
    tags: List[str] = Field(default_factory=list)
    code_snippets: Dict[str, str] = Field(default_factory=dict, alias="codeSnippets")
    description_html: str


# ── upstream response schemas ────────────────────────────────────


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PageInfo(_Schema):
    has_next_page: bool = Field(False, alias="hasNextPage")


class ArticleNode(_Schema):
    topic_id: int = Field(..., alias="topicId")
    title: str
    slug: str
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("slug")
    @classmethod
    def _slug_not_blank(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("slug는 공백일 수 없습니다.")
        return s


class ArticleEdge(_Schema):
    node: ArticleNode


class ArticleConnection(_Schema):
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")
    edges: List[ArticleEdge] = Field(default_factory=list)


class DiscussionListing(_Schema):
    """``data`` of the ``getUserDiscussTopics`` query."""

    articles: Optional[ArticleConnection] = Field(None, alias="ugcArticleUserDiscussionArticles")


class PostAuthor(_Schema):
    username: Optional[str] = None


class Post(_Schema):
    id: Optional[int] = None
    content: Optional[str] = None
    creation_date: Optional[int] = Field(None, alias="creationDate")
    author: Optional[PostAuthor] = None


class CommentItem(_Schema):
    post: Optional[Post] = None


class TopicComments(_Schema):
    data: List[CommentItem] = Field(default_factory=list)
    total_num: Optional[int] = Field(None, alias="totalNum")


class CommentListing(_Schema):
    """``data`` of the ``questionDiscussComments`` query."""

    topic_comments: Optional[TopicComments] = Field(None, alias="topicComments")


class TopicTag(_Schema):
    name: str


class CodeSnippet(_Schema):
    lang: str
    code: str = ""


class QuestionNode(_Schema):
    title: str
    content: Optional[str] = None
    difficulty: Optional[str] = None
    sample_test_case: Optional[str] = Field(None, alias="sampleTestCase")
    code_snippets: Optional[List[CodeSnippet]] = Field(None, alias="codeSnippets")
    topic_tags: Optional[List[TopicTag]] = Field(None, alias="topicTags")


class QuestionResponse(_Schema):
    """``data`` of the ``getQuestion`` query; ``question`` is null for locked problems."""

    question: Optional[QuestionNode] = None


class ProblemStat(_Schema):
    question_title_slug: str = Field(..., alias="question__title_slug")


class StatStatusPair(_Schema):
    stat: ProblemStat


class ProblemIndex(_Schema):
    """Body of the ``/api/problems/all/`` endpoint."""

    stat_status_pairs: List[StatStatusPair]


SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_response(schema: Type[SchemaT], payload: Any) -> SchemaT:
    """Validate ``payload`` against ``schema`` or raise ``ParseError``."""
    if not isinstance(payload, dict):
        raise ParseError(f"{schema.__name__}: 객체 형태의 응답이 아닙니다 ({type(payload).__name__})")
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ParseError(f"{schema.__name__}: 필수 필드가 누락되었습니다: {exc}") from exc


# ── fetch outcomes ───────────────────────────────────────────────

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class Success(Generic[RecordT]):
    identifier: str
    record: RecordT


@dataclass(frozen=True)
class Skipped:
    """Item intentionally excluded by content policy."""

    identifier: str
    reason: str


@dataclass(frozen=True)
class Failed:
    """Item whose detail request failed; terminal within a run."""

    identifier: str
    error: str


FetchOutcome = Union[Success[ProblemDetail], Skipped, Failed]


@dataclass(frozen=True)
class CommentPage:
    """All comments of one topic plus the upstream's advertised total."""

    comments: List[Comment]
    total_expected: Optional[int]
    requests: int
