from __future__ import annotations

import importlib.util
import os
from pathlib import Path


from harvest.connectors.base import CollectionError
from harvest.tasks.discussions import DiscussionRunSummary
from harvest.tasks.problems import ProblemRunSummary

SCRIPTS = Path(__file__).resolve().parents[2] / "scripts"


def _load(name: str):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_output_dir_flag_overrides_settings_without_touching_env(monkeypatch, tmp_path: Path):
    monkeypatch.delenv("HARVEST_OUTPUT_DIR", raising=False)
    module = _load("scrape_problems")
    seen = {}

    def fake_run(cfg):
        seen["output_dir"] = cfg.output_dir
        return ProblemRunSummary()

    monkeypatch.setattr(module, "run_problems", fake_run)
    monkeypatch.setattr(module, "configure_logging", lambda *a, **k: None)

    assert module.main(["--output-dir", str(tmp_path)]) == 0
    assert seen["output_dir"] == str(tmp_path)
    assert "HARVEST_OUTPUT_DIR" not in os.environ


def test_discussion_script_exits_one_on_collection_error(monkeypatch):
    module = _load("scrape_contest_discussions")

    def fake_run(_cfg):
        raise CollectionError("listing down")

    monkeypatch.setattr(module, "run_contest_discussions", fake_run)
    monkeypatch.setattr(module, "configure_logging", lambda *a, **k: None)

    assert module.main([]) == 1


def test_discussion_script_reports_summary(monkeypatch, capsys):
    module = _load("scrape_contest_discussions")
    monkeypatch.setattr(module, "run_contest_discussions", lambda _cfg: DiscussionRunSummary(topics=1, comments=4))
    monkeypatch.setattr(module, "configure_logging", lambda *a, **k: None)

    assert module.main([]) == 0
    assert "4 comments" in capsys.readouterr().out
