"""
Catalog import script: preview or save a product spreadsheet from the shell.

Usage:
    # Dry run (nothing written), prints the preview report as JSON
    python scripts/import_catalog.py data/products.xlsx

    # Client-style rows with the CSV profile, then save
    python scripts/import_catalog.py data/products.csv --format csv --save
"""

import argparse
import json
import os
import sys

# Allow imports from the project root when running as a script
_root_dir = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, _root_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(_root_dir, ".env"))


def main() -> int:
    parser = argparse.ArgumentParser(description="Preview or import a product catalog file")
    parser.add_argument("file", help="Path to an .xlsx or .csv catalog file")
    parser.add_argument(
        "--format",
        choices=["excel", "csv"],
        default="excel",
        help="Validation profile (default: excel)"
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Create missing dimensions and save valid rows (default: preview only)"
    )
    args = parser.parse_args()

    from exceptions import AppError
    from models.catalog_import import ImportFormat
    from parsers.catalog_file_parser import parse_catalog_file
    from services.catalog_import_service import get_catalog_import_service

    if not os.path.isfile(args.file):
        print(f"File not found: {args.file}", file=sys.stderr)
        return 2

    try:
        rows = parse_catalog_file(args.file)
        service = get_catalog_import_service()
        fmt = ImportFormat(args.format)

        if args.save:
            result = service.save(rows, fmt)
        else:
            result = service.preview(rows, fmt, cache=False)

    except AppError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))

    if args.save:
        print(
            f"\nSaved {result.success} of {result.total} rows ({result.failed} failed)",
            file=sys.stderr
        )
    else:
        print(
            f"\nPreview: {result.valid} valid, {result.invalid} invalid of {result.total} rows",
            file=sys.stderr
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
