#!/usr/bin/env python3
"""Check drawing text against a rule set file and print the JSON report."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from drawcheck.core.checker import check_rules, summarize
from drawcheck.services.text_extractor import TextExtractionError, extract_pdf_text
from drawcheck.utils.logging import setup_logging

SAMPLE_TEXT = "Corridor width shall not be less than 900 mm.\nTitle block: Revision 02, Date: 01-Jan-2025"

SAMPLE_RULES = [
    {
        "id": "DLF-EX-1",
        "short_description": "Minimum corridor width 900 mm",
        "technical_check": {
            "type": "numeric",
            "field_path": "plan.dimensions.corridor_width",
            "operator": ">=",
            "value": 900,
            "units": "mm",
        },
    },
    {
        "id": "DLF-EX-2",
        "short_description": "Title block must contain revision number and date",
        "technical_check": {
            "type": "presence",
            "example_text_matches": ["title block", "revision", "date"],
        },
    },
]


def load_rules(path: Path) -> list:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of rules")
    return data


def main() -> int:
    parser = argparse.ArgumentParser(description="Check drawing text against building-code rules.")
    parser.add_argument("--rules", help="Path to a rule set JSON file (default: built-in sample rules).")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text-file", help="Plain-text file with the drawing text.")
    source.add_argument("--pdf", help="Drawing PDF to extract text from.")
    source.add_argument("--sample", action="store_true", help="Use the built-in sample drawing text.")
    parser.add_argument("--context-radius", type=int, default=30, help="Context characters around each number.")
    args = parser.parse_args()

    setup_logging(stream=sys.stderr)

    try:
        rules = load_rules(Path(args.rules)) if args.rules else SAMPLE_RULES
    except (OSError, ValueError) as exc:
        print(f"Cannot load rules: {exc}", file=sys.stderr)
        return 2

    if args.sample:
        text = SAMPLE_TEXT
    elif args.text_file:
        text = Path(args.text_file).read_text(encoding="utf-8")
    else:
        try:
            text = extract_pdf_text(Path(args.pdf).read_bytes(), args.pdf)
        except (OSError, TextExtractionError) as exc:
            print(f"Cannot read drawing: {exc}", file=sys.stderr)
            return 2

    results = check_rules(rules, text, context_radius=args.context_radius)
    report = {
        "summary": summarize(results).model_dump(),
        "results": [result.to_json_dict() for result in results],
    }
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0 if report["summary"]["failed_checks"] == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
