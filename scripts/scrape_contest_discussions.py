"""Scrape weekly/biweekly contest discussion threads.

Usage:
  uv run -- python scripts/scrape_contest_discussions.py --output-dir ./var/discussions

Reads configuration from .env via pydantic settings (HARVEST_* variables).
Writes one ``<slug>-comments.json`` per contest topic.
"""

from __future__ import annotations

import argparse
from typing import List

from harvest.connectors.base import CollectionError
from harvest.settings import get_settings
from harvest.tasks.discussions import run_contest_discussions
from harvest.utils.logging import configure_logging, get_logger


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Contest discussion scraper")
    parser.add_argument("--output-dir", default=None, help="Directory for per-topic JSON files (default: HARVEST_OUTPUT_DIR)")
    args = parser.parse_args(argv)

    cfg = get_settings()
    if args.output_dir:
        cfg = cfg.model_copy(update={"output_dir": args.output_dir})
    configure_logging(cfg.log_level, json_enabled=cfg.log_json)
    logger = get_logger("scripts.scrape_contest_discussions")

    try:
        summary = run_contest_discussions(cfg)
    except CollectionError:
        logger.exception("discussions.fatal")
        return 1

    print(f"Saved {len(summary.written)} topic files ({summary.comments} comments); {len(summary.failed)} failures.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
