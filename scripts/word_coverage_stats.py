#!/usr/bin/env python3
"""
Word frequency and vocabulary coverage from token_level output.

For raw words and for lemmas: count each distinct word, rank by count and add
running cumulative counts/proportions. Then look up how many of the top-ranked
lemmas are needed to cover a given share of all dialogue.

Reads:
  vocab_out/token_level.parquet   (from stanza_lemmatize_dialogue.py)

Writes to --outdir:
  word_counts.csv       raw word frequency table
  lemma_counts.csv      lemma frequency table (canonical)
  words_for_prop.csv    coverage target -> number of lemmas needed
  speaker_summary.csv   lines / tokens / distinct lemmas per speaker
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pandas as pd


COVERAGE_TARGETS = (0.98, 0.95, 0.9, 0.5)

COUNT_COLUMNS = ["word", "count", "cum_count", "cum_prop", "rank"]
TOKEN_REQUIRED = ["line_id", "speaker", "word", "lemma"]


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def empty_counts() -> pd.DataFrame:
    return pd.DataFrame({
        "word": pd.Series(dtype="object"),
        "count": pd.Series(dtype="int64"),
        "cum_count": pd.Series(dtype="int64"),
        "cum_prop": pd.Series(dtype="float64"),
        "rank": pd.Series(dtype="int64"),
    })


def add_cumulative_stats(words: Iterable[str]) -> pd.DataFrame:
    """
    Count how many times each word appears, sort by number of appearances
    and add cumulative sums, cumulative proportions and a 1-based rank.

    Equal counts keep the order in which the words first appeared.
    """
    tokens = pd.DataFrame({"word": pd.Series(list(words), dtype="object")}).dropna()
    if tokens.empty:
        return empty_counts()

    counts = (
        tokens.groupby("word", sort=False)
        .size()
        .reset_index(name="count")
        .sort_values("count", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    counts["cum_count"] = counts["count"].cumsum()
    counts["cum_prop"] = counts["cum_count"] / counts["cum_count"].iloc[-1]
    counts["rank"] = counts.index + 1
    return counts[COUNT_COLUMNS]


def check_prop(prop: float) -> float:
    if not 0.0 <= prop <= 1.0:
        raise ValueError(f"Coverage target must be within [0, 1], got {prop}")
    return prop


def words_for_prop(counts: pd.DataFrame, prop: float) -> Optional[int]:
    """Number of top-ranked words needed so that their cumulative proportion exceeds prop.

    Returns None when no rank gets past prop.
    """
    check_prop(prop)
    hits = counts.loc[counts["cum_prop"] > prop, "rank"]
    if hits.empty:
        return None
    return int(hits.iloc[0])


def words_for_prop_table(counts: pd.DataFrame, props: Sequence[float] = COVERAGE_TARGETS) -> pd.DataFrame:
    return pd.DataFrame({
        "prop": pd.Series([float(p) for p in props], dtype="float64"),
        "words": pd.array([words_for_prop(counts, p) for p in props], dtype="Int64"),
    })


def ensure_token_schema(tok: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in TOKEN_REQUIRED if c not in tok.columns]
    if missing:
        raise ValueError(f"token_level missing columns {missing}. Found: {list(tok.columns)}")
    return tok


def speaker_summary(tok: pd.DataFrame) -> pd.DataFrame:
    tok = ensure_token_schema(tok)
    if tok.empty:
        return pd.DataFrame(columns=["speaker", "n_lines", "n_tokens", "n_distinct_lemmas"])
    return (
        tok.groupby("speaker", as_index=False)
        .agg(
            n_lines=("line_id", "nunique"),
            n_tokens=("word", "size"),
            n_distinct_lemmas=("lemma", "nunique"),
        )
        .sort_values(["n_tokens", "speaker"], ascending=[False, True])
        .reset_index(drop=True)
    )


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--token_parquet", default="vocab_out/token_level.parquet")
    ap.add_argument("--outdir", default="analysis")
    ap.add_argument("--props", nargs="*", type=float, default=list(COVERAGE_TARGETS),
                    help="Coverage targets as proportions (default: 0.98 0.95 0.9 0.5)")
    args = ap.parse_args()

    outdir = Path(args.outdir)
    ensure_dir(outdir)

    tok = ensure_token_schema(pd.read_parquet(args.token_parquet))

    word_counts = add_cumulative_stats(tok["word"])
    lemma_counts = add_cumulative_stats(tok["lemma"])
    coverage = words_for_prop_table(lemma_counts, [check_prop(p) for p in args.props])
    speakers = speaker_summary(tok)

    word_counts.to_csv(outdir / "word_counts.csv", index=False)
    lemma_counts.to_csv(outdir / "lemma_counts.csv", index=False)
    coverage.to_csv(outdir / "words_for_prop.csv", index=False)
    speakers.to_csv(outdir / "speaker_summary.csv", index=False)

    print(coverage.to_string(index=False))
    print("Wrote:")
    print(outdir / "word_counts.csv")
    print(outdir / "lemma_counts.csv")
    print(outdir / "words_for_prop.csv")
    print(outdir / "speaker_summary.csv")


if __name__ == "__main__":
    main()
