"""File writers for harvested records.

Every writer overwrites its target in full, so writing identical records twice
yields byte-identical files. Failures surface as ``SinkError`` for the one
artifact involved.
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Iterable, Sequence

from harvest.connectors.base import SinkError
from harvest.models.domain import Comment, ProblemDetail, Topic

CSV_HEADER = ("slug", "title", "difficulty", "sample_test_case", "tags")
TAG_DELIMITER = ";"


def _write_text(path: Path, text: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as exc:
        raise SinkError(str(path), f"파일 쓰기 실패: {exc}") from exc
    return path


def write_json(path: Path, payload: Any) -> Path:
    try:
        text = json.dumps(payload, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SinkError(str(path), f"JSON 직렬화 실패: {exc}") from exc
    return _write_text(path, text)


def topic_dump_path(directory: Path, topic: Topic) -> Path:
    return directory / f"{topic.slug}-comments.json"


def write_topic_dump(directory: Path, topic: Topic, comments: Sequence[Comment]) -> Path:
    payload = {
        "title": topic.title,
        "slug": topic.slug,
        "topicId": topic.topic_id,
        "createdAt": topic.created_at,
        "commentCount": len(comments),
        "comments": [c.model_dump(by_alias=True) for c in comments],
    }
    return write_json(topic_dump_path(directory, topic), payload)


def write_problems_json(path: Path, problems: Sequence[ProblemDetail]) -> Path:
    return write_json(path, [p.model_dump(by_alias=True) for p in problems])


def _escape_newlines(value: str) -> str:
    return value.replace("\r\n", "\n").replace("\n", "\\n")


def problem_csv_rows(problems: Iterable[ProblemDetail]) -> list[list[str]]:
    rows: list[list[str]] = []
    for p in problems:
        rows.append(
            [
                p.slug,
                p.title,
                p.difficulty or "",
                _escape_newlines(p.sample_test_case),
                TAG_DELIMITER.join(p.tags),
            ]
        )
    return rows


def write_problem_csv(path: Path, problems: Sequence[ProblemDetail]) -> Path:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(problem_csv_rows(problems))
    return _write_text(path, buf.getvalue())


def write_failures(path: Path, identifiers: Sequence[str]) -> Path:
    return _write_text(path, "\n".join(identifiers))
