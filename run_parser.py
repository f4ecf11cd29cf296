#!/usr/bin/env python3
"""
CLI script to parse saved site pages into JSON records.

Reads HTML files saved from the site, runs the matching assembler and
prints (or writes) one JSON entry per file. No network access: fetch the
pages with whatever client you like first.

Examples:
    python run_parser.py view.html --url https://www.furaffinity.net/view/38351732/
    python run_parser.py inbox.html --url https://www.furaffinity.net/msg/submissions/ -o out.json
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from labrat.config import SUPPORTED_PARSERS, get_settings
from labrat.exceptions import LabratError
from labrat.main import LabratParser
from labrat.resources import PageType


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Parse saved site pages into JSON")
    parser.add_argument("files", nargs="+", help="Saved HTML files")
    parser.add_argument("--url", "-u", required=True, help="URL the pages were fetched from")
    parser.add_argument("--page", "-p", choices=[t.value for t in PageType],
                        help="Page type (guessed from --url if omitted)")
    parser.add_argument("--parser", choices=SUPPORTED_PARSERS, default=settings.html_parser,
                        help="BeautifulSoup tree builder")
    parser.add_argument("--output", "-o", help="Output JSON file")
    args = parser.parse_args()

    labrat = LabratParser(html_parser=args.parser, log_level=settings.log_level)
    page_type = PageType(args.page) if args.page else None

    results = []
    failures = 0

    for filepath in args.files:
        path = Path(filepath)
        print(f"Parsing: {path.name}", file=sys.stderr)

        try:
            response = labrat.parse_file(path, args.url, page_type)
        except LabratError as e:
            failures += 1
            results.append({"file": path.name, "status": "error", **e.to_dict()})
            print(f"  ✗ {type(e).__name__}: {e.message}", file=sys.stderr)
            continue
        except OSError as e:
            failures += 1
            results.append({"file": path.name, "status": "error", "error": "OSError", "message": str(e)})
            print(f"  ✗ {e}", file=sys.stderr)
            continue

        results.append({
            "file": path.name,
            "status": "success",
            **response.model_dump(mode="json"),
        })
        print("  ✓ parsed", file=sys.stderr)

    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output)
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
