# -*- coding: utf-8 -*-
"""
Resolve a file of payloads against a union spec.

Usage:
    python -m src.variants.cli --spec config/union.yaml --input payloads.jsonl \\
        --output resolved.jsonl

    # Only validate the union spec and report overlapping labels
    python -m src.variants.cli --spec config/union.yaml --check
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .batch import read_payloads, resolve_and_summarize, write_payloads
from .loader import load_union_spec
from .resolver import candidate_labels, find_ambiguities

PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve payloads to schema variants of a tagged union."
    )
    parser.add_argument(
        "--spec",
        type=Path,
        required=True,
        help="Path to the union spec (YAML or JSON)",
    )
    parser.add_argument(
        "--input",
        type=Path,
        help="Payload file (.jsonl/.ndjson or JSON array)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Output JSON Lines path (default: <input>.resolved.jsonl)",
    )
    parser.add_argument(
        "--column",
        type=str,
        default="variant",
        help="Column holding the resolved schema name (default: variant)",
    )
    parser.add_argument(
        "--discriminator-field",
        type=str,
        default=None,
        help="Override the union spec's discriminator field",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load the union spec and report ambiguous labels",
    )
    return parser.parse_args(argv)


def check_spec(spec_path: Path, discriminator_field: Optional[str] = None) -> int:
    """Load a spec, log each schema's labels; return 1 if labels collide."""
    union_spec = load_union_spec(spec_path, discriminator_field=discriminator_field)
    for index, schema in enumerate(union_spec.schemas):
        marker = " (default)" if index == 0 else ""
        labels = ", ".join(repr(label) for label in candidate_labels(schema, union_spec))
        logger.info(f"  {schema.name}{marker}: {labels}")

    ambiguities = find_ambiguities(union_spec)
    if ambiguities:
        logger.error(f"{len(ambiguities)} ambiguous label(s) in {spec_path.name}")
        return 1
    logger.info("No ambiguous labels")
    return 0


def run(
    spec_path: Path,
    input_path: Path,
    output_path: Optional[Path] = None,
    column: str = "variant",
    discriminator_field: Optional[str] = None,
) -> Path:
    """Resolve every payload of input_path and write JSON Lines output."""
    union_spec = load_union_spec(spec_path, discriminator_field=discriminator_field)
    df = read_payloads(input_path)

    resolved, summary = resolve_and_summarize(df, union_spec, column=column)

    if output_path is None:
        output_path = input_path.with_name(f"{input_path.stem}.resolved.jsonl")
    write_payloads(resolved, output_path)

    logger.info(f"Wrote {summary.total} payloads to {output_path}")
    for name, count in summary.variant_counts.items():
        logger.info(f"  {name}: {count}")
    for outcome, count in sorted(summary.outcome_counts.items()):
        logger.info(f"  [{outcome}] {count}")
    if summary.fallback_count:
        logger.info(f"  Fallbacks: {summary.fallback_count} ({summary.pct_fallback():.1f}%)")

    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    logging.basicConfig(
        level=os.getenv("VARIANTS_LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s: %(message)s",
    )
    args = _parse_args(argv)

    if args.check:
        return check_spec(args.spec, discriminator_field=args.discriminator_field)

    if args.input is None:
        logger.error("--input is required unless --check is given")
        return 2

    run(
        spec_path=args.spec,
        input_path=args.input,
        output_path=args.output,
        column=args.column,
        discriminator_field=args.discriminator_field,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
