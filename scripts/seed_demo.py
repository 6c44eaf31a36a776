#!/usr/bin/env python3
"""Seed a live database with the demo boards and experiments.

Copies the guest-mode demo data into a SQL database so live mode starts
with the same boards, scores and learnings the mock UI shows.

Usage:
    python scripts/seed_demo.py [db_path]

This script:
1. Initializes the database (creates tables if missing)
2. Upserts the demo boards
3. Upserts the demo experiments and their comments
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from growthboard.db.session import DEFAULT_DB_PATH  # noqa: E402
from growthboard.store.memory import demo_boards, demo_experiments  # noqa: E402
from growthboard.store.sql import SqlStore  # noqa: E402


def seed_database(db_path: Path | str) -> int:
    """Write demo records into the database at db_path.

    Existing records with the same ids are overwritten; comments are only
    appended to experiments that have none yet.

    Returns:
        Number of experiments written.
    """
    store = SqlStore(db_path)
    existing = {e.id: e for e in store.fetch_experiments()}

    for board in demo_boards():
        store.upsert_board(board)
        print(f"  Board: {board.name} ({board.id})")

    experiments = demo_experiments()
    for experiment in experiments:
        store.upsert_experiment(experiment)
        already = existing.get(experiment.id)
        if already is None or not already.comments:
            for comment in experiment.comments:
                store.append_comment(experiment.id, comment)
        print(f"  Experiment: {experiment.title} [{experiment.status}]")

    return len(experiments)


def main() -> int:
    """Main entry point."""
    db_path = sys.argv[1] if len(sys.argv) > 1 else str(PROJECT_ROOT / DEFAULT_DB_PATH)

    print("=" * 60)
    print("Growthboard Demo Seeding Script")
    print("=" * 60)

    print(f"\nSeeding {db_path}...")
    count = seed_database(db_path)

    print("\n" + "=" * 60)
    print(f"Demo seeding complete! ({count} experiments)")
    print(f"Database: {db_path}")
    print("Run with GROWTHBOARD_MODE=live GROWTHBOARD_DB_PATH=" + db_path)
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
