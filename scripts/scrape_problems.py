"""Scrape problem statements, tags and code templates.

Usage:
  uv run -- python scripts/scrape_problems.py --output-dir ./var/problems

Reads configuration from .env via pydantic settings (HARVEST_* variables).
Writes the JSON dump, the CSV projection and, when anything failed, the
failed-slug log.
"""

from __future__ import annotations

import argparse
from typing import List

from harvest.connectors.base import CollectionError
from harvest.settings import get_settings
from harvest.tasks.problems import run_problems
from harvest.utils.logging import configure_logging, get_logger


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Problem scraper")
    parser.add_argument("--output-dir", default=None, help="Directory for output files (default: HARVEST_OUTPUT_DIR)")
    args = parser.parse_args(argv)

    cfg = get_settings()
    if args.output_dir:
        cfg = cfg.model_copy(update={"output_dir": args.output_dir})
    configure_logging(cfg.log_level, json_enabled=cfg.log_json)
    logger = get_logger("scripts.scrape_problems")

    try:
        summary = run_problems(cfg)
    except CollectionError:
        logger.exception("problems.fatal")
        return 1

    print(f"Scraped {len(summary.problems)} problems; {len(summary.skipped)} skipped; {len(summary.failed)} failures.")
    for path in summary.written:
        print(f"  wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
