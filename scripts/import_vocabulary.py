"""
Import vocabulary items from CSV into the catalog.

Expected columns: id, english, japanese, phonetic (optional), part_of_speech
(optional), example_english (optional), example_japanese (optional).
Existing ids are updated in place.

Usage:
    python -m scripts.import_vocabulary data/vocabulary.csv [--dry-run]
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from vocab_core.schemas import VocabularyItemIn
from vocab_core.srs import ProgressDatabase


def load_items(csv_path: Path) -> tuple[list[VocabularyItemIn], list[str]]:
    """
    Read and validate CSV rows.

    Returns:
        Tuple of (valid_items, error_messages)
    """
    df = pd.read_csv(csv_path, dtype=str).fillna("")
    items: list[VocabularyItemIn] = []
    errors: list[str] = []

    for row_number, row in enumerate(df.to_dict(orient="records"), start=2):
        payload = {key: value for key, value in row.items() if value != ""}
        try:
            items.append(VocabularyItemIn.model_validate(payload))
        except ValidationError as exc:
            errors.append(f"row {row_number}: {exc.errors()[0]['msg']}")

    return items, errors


def main():
    parser = argparse.ArgumentParser(description="Import vocabulary items from CSV")
    parser.add_argument("csv_path", type=Path, help="CSV file to import")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate only, don't write to the database"
    )
    args = parser.parse_args()

    items, errors = load_items(args.csv_path)
    for message in errors:
        print(f"✗ Skipped {message}")

    if args.dry_run:
        print(f"\n⚠ DRY RUN MODE - {len(items)} valid items, nothing written")
        return

    db = ProgressDatabase.from_env()
    db.init_db()
    written = db.add_items(items)

    print(f"\n{'='*60}")
    print(f"Imported: {written}")
    print(f"Skipped:  {len(errors)}")
    print(f"Total:    {len(items) + len(errors)}")


if __name__ == "__main__":
    main()
