"""
Reset learner progress.

DANGEROUS: This deletes review progress (the vocabulary catalog is kept)!
Only use when a learner wants to start fresh, or for testing.

Usage:
    python -m scripts.reset_progress [--user USER_ID | --all] [--yes]
"""

from __future__ import annotations

import argparse

from vocab_core.config import get_default_user_id
from vocab_core.srs import ProgressDatabase


def main():
    parser = argparse.ArgumentParser(
        description="Delete spaced-repetition progress for one learner or everyone"
    )
    parser.add_argument(
        "--user",
        default=get_default_user_id(),
        help="Learner whose progress is deleted (default: DEFAULT_USER_ID)"
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Delete progress of every learner"
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt"
    )
    args = parser.parse_args()

    target = "ALL learners" if args.all else f"learner '{args.user}'"

    print("=" * 60)
    print("WARNING: Reset Learner Progress")
    print("=" * 60)
    print()
    print(f"This will DELETE progress of {target}:")
    print("  - Counters, streaks and ease factors")
    print("  - Next / recommended review dates")
    print("  - Per-mode statistics")
    print()

    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("\nCancelled. No changes made.")
            return

    print("\nResetting progress...")
    db = ProgressDatabase.from_env()
    db.init_db()
    deleted = db.reset_progress(None if args.all else args.user)
    print(f"✓ Deleted {deleted} progress records.")


if __name__ == "__main__":
    main()
