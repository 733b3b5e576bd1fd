"""
Import words from a CSV file into the vocabulary database.

The CSV needs a `word` and a `meaning` column (extra columns are ignored).
Whitespace is normalised, blank rows and pairs that already exist are
skipped, so re-running the same file is harmless.

Usage:
    python -m scripts.import_words data/word_list.csv
    python -m scripts.import_words data/word_list.csv --dry-run
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from vocab import config, lexicon_repo
from vocab.scheduling import init_db

logger = logging.getLogger(__name__)

# Column names
WORD_COL = "word"
MEANING_COL = "meaning"


def normalize(s: pd.Series) -> pd.Series:
    s = s.fillna("").astype(str).str.strip()
    # collapse multiple spaces
    return s.str.replace(r"\s+", " ", regex=True)


def read_word_csv(path: Path) -> pd.DataFrame:
    """
    Load and clean a word CSV.

    Returns:
        DataFrame with normalised `word` and `meaning` columns, blank rows
        and in-file duplicates removed

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If a required column is missing
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing CSV file: {path}")

    df = pd.read_csv(path, dtype=str)
    missing = [col for col in (WORD_COL, MEANING_COL) if col not in df.columns]
    if missing:
        raise ValueError(
            f"CSV must contain columns '{WORD_COL}' and '{MEANING_COL}'. "
            f"Found: {list(df.columns)}"
        )

    df = df[[WORD_COL, MEANING_COL]].copy()
    df[WORD_COL] = normalize(df[WORD_COL])
    df[MEANING_COL] = normalize(df[MEANING_COL])

    df = df[(df[WORD_COL] != "") & (df[MEANING_COL] != "")]
    return df.drop_duplicates(subset=[WORD_COL, MEANING_COL]).reset_index(drop=True)


def import_words(path: Path, dry_run: bool = False, session_factory=None) -> tuple[int, int]:
    """
    Import a word CSV.

    Returns:
        (added count, skipped count)
    """
    df = read_word_csv(path)
    pairs = list(zip(df[WORD_COL], df[MEANING_COL]))

    if dry_run:
        logger.info("Dry run: %d candidate rows in %s", len(pairs), path)
        return len(pairs), 0

    added, skipped = lexicon_repo.add_words(pairs, session_factory=session_factory)
    return len(added), len(skipped)


def main() -> None:
    parser = argparse.ArgumentParser(description="Import words from CSV")
    parser.add_argument("csv_path", type=Path, help="CSV with word,meaning columns")
    parser.add_argument("--dry-run", action="store_true", help="Only parse and count rows")
    args = parser.parse_args()

    config.configure_logging()
    if not args.dry_run:
        init_db()

    added, skipped = import_words(args.csv_path, dry_run=args.dry_run)
    print(f"Added: {added}  Skipped: {skipped}")


if __name__ == "__main__":
    main()
