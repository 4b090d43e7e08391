import pytest

from harvest.settings import Settings, get_settings, reset_settings_cache


def test_defaults_match_leetcode_endpoints(monkeypatch):
    monkeypatch.delenv("HARVEST_PROBLEM_LIMIT", raising=False)
    settings = Settings(_env_file=None)

    assert settings.graphql_url == "https://leetcode.com/graphql/"
    assert settings.problems_url == "https://leetcode.com/api/problems/all/"
    assert settings.discussion_page_size == 30
    assert settings.comment_page_size == 20
    assert settings.problem_limit == 1500
    assert settings.excluded_tags == ["Database"]
    assert settings.problems_csv == "leetcode_data_dsa.csv"


def test_get_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("HARVEST_PROBLEM_LIMIT", "50")
    monkeypatch.setenv("HARVEST_EXCLUDED_TAGS", "Database, Shell")
    monkeypatch.setenv("HARVEST_OUTPUT_DIR", "./var/out")

    settings = get_settings()

    assert settings.problem_limit == 50
    assert settings.excluded_tags == ["Database", "Shell"]
    assert settings.output_dir == "./var/out"


def test_excluded_tags_accepts_json_array(monkeypatch):
    monkeypatch.setenv("HARVEST_EXCLUDED_TAGS", '["Database", "Concurrency"]')

    assert get_settings().excluded_tags == ["Database", "Concurrency"]


def test_reset_settings_cache_reloads(monkeypatch):
    monkeypatch.setenv("HARVEST_PROBLEM_LIMIT", "10")
    first = get_settings()
    monkeypatch.setenv("HARVEST_PROBLEM_LIMIT", "20")
    assert get_settings().problem_limit == first.problem_limit == 10

    reset_settings_cache()
    assert get_settings().problem_limit == 20


def test_comment_page_size_upper_bound(monkeypatch):
    monkeypatch.setenv("HARVEST_COMMENT_PAGE_SIZE", "101")

    with pytest.raises(RuntimeError) as exc:
        get_settings()

    assert "100 이하" in str(exc.value)


def test_invalid_slug_pattern_rejected(monkeypatch):
    monkeypatch.setenv("HARVEST_DISCUSSION_SLUG_PATTERN", "(unclosed")

    with pytest.raises(RuntimeError):
        get_settings()
