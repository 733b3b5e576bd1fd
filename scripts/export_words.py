"""
Export the vocabulary catalog with review state to CSV.

Timestamps are written as ISO-8601 UTC strings.

Usage:
    python -m scripts.export_words data/export.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from vocab import config, lexicon_repo
from vocab.scheduling import from_millis, init_db

EXPORT_COLUMNS = [
    "id", "word", "meaning",
    "stability", "difficulty", "retrievability",
    "total_reviews", "success_count",
    "last_reviewed_at", "next_review_at",
]


def _iso(timestamp_ms):
    moment = from_millis(timestamp_ms)
    return moment.isoformat() if moment is not None else ""


def build_export_frame(session_factory=None) -> pd.DataFrame:
    """Catalog as a DataFrame, one row per word."""
    rows = []
    for entry in lexicon_repo.list_words(session_factory=session_factory):
        row = entry.model_dump(include=set(EXPORT_COLUMNS))
        row["last_reviewed_at"] = _iso(entry.last_reviewed_at)
        row["next_review_at"] = _iso(entry.next_review_at)
        rows.append(row)
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def main() -> None:
    parser = argparse.ArgumentParser(description="Export words to CSV")
    parser.add_argument("out_path", type=Path, help="Destination CSV file")
    args = parser.parse_args()

    config.configure_logging()
    init_db()

    df = build_export_frame()
    args.out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.out_path, index=False)
    print(f"Exported {len(df)} words to {args.out_path}")


if __name__ == "__main__":
    main()
