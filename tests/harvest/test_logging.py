import json
import logging

from harvest.utils.logging import ExtraFormatter, JsonFormatter


def _record(**extra):
    logger = logging.getLogger("harvest.test")
    return logger.makeRecord("harvest.test", logging.INFO, __file__, 1, "problems.fetch.failed", None, None, extra=extra)


def test_json_formatter_merges_extra_fields():
    payload = json.loads(JsonFormatter().format(_record(slug="two-sum", attempt=2)))

    assert payload["event"] == "problems.fetch.failed"
    assert payload["level"] == "INFO"
    assert payload["slug"] == "two-sum"
    assert payload["attempt"] == 2
    assert "lineno" not in payload


def test_extra_formatter_appends_key_values():
    line = ExtraFormatter("%(levelname)s %(message)s").format(_record(slug="two-sum"))

    assert line == "INFO problems.fetch.failed slug=two-sum"
