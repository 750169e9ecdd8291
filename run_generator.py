#!/usr/bin/env python3
"""
Command-line script to generate style value declarations.

Generates one module per CSS spec family from the csswg drafts, or the CSS
feature data table when given the css-feature-data sentinel.

Usage:
    python run_generator.py align
    python run_generator.py anchor-position --verbose
    python run_generator.py sizing --dry-run
    python run_generator.py css-feature-data
"""

import argparse
import json
import logging
import sys

# Load .env file automatically
from dotenv import load_dotenv
load_dotenv()

from css_valuegen.config import FEATURE_DATA_MODE, GeneratorSettings
from css_valuegen.exceptions import ValueGenError
from css_valuegen.logger import setup_logger
from css_valuegen.main import ValueGenerator


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate style value declarations from the CSS drafts"
    )
    parser.add_argument(
        "name",
        nargs="?",
        default="",
        help=f"Spec family name (e.g. align, fonts) or '{FEATURE_DATA_MODE}'"
    )
    parser.add_argument(
        "--output-dir",
        help="Directory holding one module directory per family"
    )
    parser.add_argument(
        "--cache-dir",
        help="Directory for cached drafts and datasets"
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Run the pipeline but do not touch the output"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logger(level=log_level)
    log = logging.getLogger("css_valuegen")

    try:
        settings = GeneratorSettings.from_env(
            output_dir=args.output_dir,
            cache_dir=args.cache_dir
        )
        action = ValueGenerator(settings=settings).run(args.name, dry_run=args.dry_run)
    except ValueGenError as e:
        # Every generator error is fatal; the message names family and property
        log.error(f"✗ {e.message}")
        log.debug(json.dumps(e.to_response(), indent=2))
        return 1

    log.info(f"✓ {args.name or 'nothing'}: {action}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
