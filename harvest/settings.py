"""Configuration models for the harvester."""

from __future__ import annotations

import json
import re
from functools import lru_cache
from typing import Annotated, Any, List

from pydantic import (
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """수집기 환경 설정."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    graphql_url: str = Field(
        "https://leetcode.com/graphql/",
        alias="HARVEST_GRAPHQL_URL",
        description="GraphQL 엔드포인트",
    )
    problems_url: str = Field(
        "https://leetcode.com/api/problems/all/",
        alias="HARVEST_PROBLEMS_URL",
        description="문제 목록 REST 엔드포인트",
    )
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        alias="HARVEST_USER_AGENT",
        description="요청 User-Agent 헤더",
    )
    referer: str = Field("https://leetcode.com/discuss/", alias="HARVEST_REFERER", description="기본 Referer 헤더")
    timeout_seconds: PositiveInt = Field(30, alias="HARVEST_TIMEOUT_SECONDS", description="HTTP 타임아웃(초)")

    discussion_username: str = Field("leetcode", alias="HARVEST_DISCUSSION_USERNAME", description="토론 글 작성 계정")
    discussion_page_size: PositiveInt = Field(30, alias="HARVEST_DISCUSSION_PAGE_SIZE", description="토론 목록 페이지 크기")
    discussion_slug_pattern: str = Field(
        r"^(weekly|biweekly)-contest-\d+",
        alias="HARVEST_DISCUSSION_SLUG_PATTERN",
        description="수집 대상 토론 slug 정규식",
    )
    comment_page_size: PositiveInt = Field(20, alias="HARVEST_COMMENT_PAGE_SIZE", description="댓글 페이지 크기(≤100)")
    discussion_delay_seconds: NonNegativeFloat = Field(
        0.4,
        alias="HARVEST_DISCUSSION_DELAY_SECONDS",
        description="토론 파이프라인 요청 간 지연(초)",
    )

    problem_delay_seconds: NonNegativeFloat = Field(
        1.0,
        alias="HARVEST_PROBLEM_DELAY_SECONDS",
        description="문제 파이프라인 요청 간 지연(초)",
    )
    problem_limit: NonNegativeInt = Field(1500, alias="HARVEST_PROBLEM_LIMIT", description="수집할 최대 문제 수 (0이면 제한 없음)")
    excluded_tags: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["Database"],
        alias="HARVEST_EXCLUDED_TAGS",
        description="단독 태그일 때 제외할 카테고리 목록",
    )
    collect_max_attempts: PositiveInt = Field(
        3,
        alias="HARVEST_COLLECT_MAX_ATTEMPTS",
        description="목록 페이지 요청 최대 시도 횟수",
    )

    output_dir: str = Field(".", alias="HARVEST_OUTPUT_DIR", description="출력 파일 디렉터리")
    problems_json: str = Field("leetcode_data_dsa.json", alias="HARVEST_PROBLEMS_JSON", description="문제 JSON 파일명")
    problems_csv: str = Field("leetcode_data_dsa.csv", alias="HARVEST_PROBLEMS_CSV", description="문제 CSV 파일명")
    failed_log: str = Field("failed_slugs.txt", alias="HARVEST_FAILED_LOG", description="실패 slug 목록 파일명")

    log_level: str = Field("INFO", alias="HARVEST_LOG_LEVEL", description="로그 레벨.")
    log_json: bool = Field(False, alias="HARVEST_LOG_JSON", description="로그를 JSON 형식으로 출력할지 여부.")

    @field_validator("discussion_slug_pattern")
    @classmethod
    def _validate_slug_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"HARVEST_DISCUSSION_SLUG_PATTERN이 올바른 정규식이 아닙니다: {exc}") from exc
        return value

    @field_validator("comment_page_size")
    @classmethod
    def _validate_comment_page_size(cls, v: int) -> int:
        if v > 100:
            raise ValueError("HARVEST_COMMENT_PAGE_SIZE는 100 이하여야 합니다.")
        return v

    @field_validator("excluded_tags", mode="before")
    @classmethod
    def _parse_excluded_tags(cls, value: Any) -> List[Any]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    return json.loads(stripped)
                except json.JSONDecodeError as exc:
                    raise ValueError("HARVEST_EXCLUDED_TAGS는 JSON 배열이어야 합니다.") from exc
            return [part.strip() for part in stripped.split(",") if part.strip()]
        if isinstance(value, list):
            return value
        raise ValueError("HARVEST_EXCLUDED_TAGS는 리스트 형태여야 합니다.")

    @field_validator("output_dir", "problems_json", "problems_csv", "failed_log")
    @classmethod
    def _validate_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("출력 경로는 공백일 수 없습니다.")
        return stripped


@lru_cache()
def get_settings() -> Settings:
    """환경 변수를 기준으로 Settings 인스턴스를 반환한다."""
    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"환경 변수 검증에 실패했습니다: {exc}") from exc


def reset_settings_cache() -> None:
    """Settings LRU 캐시를 초기화한다 (테스트 용도)."""
    get_settings.cache_clear()  # type: ignore[attr-defined]
