from __future__ import annotations

import json
from pathlib import Path

import pytest

from harvest.connectors.base import SinkError
from harvest.models.domain import Comment, ProblemDetail, Topic
from harvest.services.sink import (
    write_failures,
    write_problem_csv,
    write_problems_json,
    write_topic_dump,
)


def _problems():
    return [
        ProblemDetail(
            slug="two-sum",
            title="Two Sum",
            difficulty="Easy",
            sample_test_case="[2,7,11,15]\n9",
            tags=["Array", "Hash Table"],
            code_snippets={"Python3": "class Solution:\n    pass"},
            description_html="<p>Given an array…</p>",
        ),
        ProblemDetail(
            slug="add-two-numbers",
            title="Add Two Numbers, Again",
            difficulty="Medium",
            tags=["Linked List"],
            description_html="<p>You are given two lists</p>",
        ),
    ]


def test_problem_json_uses_wire_field_names(tmp_path: Path):
    path = write_problems_json(tmp_path / "problems.json", _problems())

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data[0] == {
        "slug": "two-sum",
        "title": "Two Sum",
        "difficulty": "Easy",
        "sampleTestCase": "[2,7,11,15]\n9",
        "tags": ["Array", "Hash Table"],
        "codeSnippets": {"Python3": "class Solution:\n    pass"},
        "description_html": "<p>Given an array…</p>",
    }
    assert data[1]["sampleTestCase"] == ""


def test_problem_csv_escapes_newlines_and_joins_tags(tmp_path: Path):
    path = write_problem_csv(tmp_path / "problems.csv", _problems())

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "slug,title,difficulty,sample_test_case,tags"
    assert lines[1] == "two-sum,Two Sum,Easy,\"[2,7,11,15]\\n9\",Array;Hash Table"
    assert lines[2] == "add-two-numbers,\"Add Two Numbers, Again\",Medium,,Linked List"
    assert len(lines) == 3


def test_writes_are_idempotent(tmp_path: Path):
    topic = Topic(topic_id=7, title="Weekly Contest 1", slug="weekly-contest-1", created_at="2020-01-01")
    comments = [Comment(author="alice", content="nice", created_at=1), Comment()]

    first = [
        write_problems_json(tmp_path / "p.json", _problems()).read_bytes(),
        write_problem_csv(tmp_path / "p.csv", _problems()).read_bytes(),
        write_failures(tmp_path / "f.txt", ["a", "b"]).read_bytes(),
        write_topic_dump(tmp_path, topic, comments).read_bytes(),
    ]
    second = [
        write_problems_json(tmp_path / "p.json", _problems()).read_bytes(),
        write_problem_csv(tmp_path / "p.csv", _problems()).read_bytes(),
        write_failures(tmp_path / "f.txt", ["a", "b"]).read_bytes(),
        write_topic_dump(tmp_path, topic, comments).read_bytes(),
    ]

    assert first == second


def test_overwrite_replaces_previous_content(tmp_path: Path):
    path = tmp_path / "failed.txt"
    write_failures(path, ["one", "two", "three"])
    write_failures(path, ["four"])

    assert path.read_text(encoding="utf-8") == "four"


def test_failure_log_is_one_identifier_per_line(tmp_path: Path):
    path = write_failures(tmp_path / "nested" / "failed.txt", ["two-sum", "lru-cache"])

    assert path.read_text(encoding="utf-8") == "two-sum\nlru-cache"


def test_topic_dump_shape(tmp_path: Path):
    topic = Topic(topic_id=7, title="Weekly Contest 1", slug="weekly-contest-1", created_at="2020-01-01")
    path = write_topic_dump(tmp_path, topic, [Comment(author="alice", content="gg", created_at=1700000000)])

    assert path.name == "weekly-contest-1-comments.json"
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "title": "Weekly Contest 1",
        "slug": "weekly-contest-1",
        "topicId": 7,
        "createdAt": "2020-01-01",
        "commentCount": 1,
        "comments": [{"author": "alice", "content": "gg", "createdAt": 1700000000}],
    }


def test_unwritable_target_raises_sink_error(tmp_path: Path):
    target = tmp_path / "taken"
    target.mkdir()

    with pytest.raises(SinkError) as exc:
        write_failures(target, ["x"])
    assert exc.value.path == str(target)
