#!/usr/bin/env python3
"""
Generate a single Markdown report on vocabulary coverage and embed the chart.

Assumes you already ran:
  1) stanza_lemmatize_dialogue.py        -> writes vocab_out/*.parquet
  2) scripts/word_coverage_stats.py      -> writes analysis/*.csv
  3) scripts/plot_coverage_curve.py      -> writes analysis/figures/cumulative_coverage.png

Output:
  analysis/report.md
  analysis/top_words.xlsx   (top-N lemmas, filterable/sortable)
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path

import pandas as pd


TOP_N = 1140
PREVIEW_ROWS = 5
TOP_TABLE_ROWS = 10
MISSING = "—"


def md_table(df: pd.DataFrame, max_rows: int = 25) -> str:
    if df is None or df.empty:
        return "_(no data)_\n"
    return df.head(max_rows).to_markdown(index=False) + "\n"


def ranked_words(counts: pd.DataFrame, n: int) -> pd.DataFrame:
    """rank, count, word and cumulative proportion as a percentage, top n rows."""
    out = counts.sort_values("rank").head(n)
    return pd.DataFrame({
        "rank": out["rank"].astype(int),
        "count": out["count"].astype(int),
        "word": out["word"],
        "cumulative proportion": out["cum_prop"].map(lambda p: f"{p:.2%}"),
    })


def coverage_display(coverage: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame({
        "Cumulative percentage": coverage["prop"].map(lambda p: f"{p:.0%}"),
        "Number of words": coverage["words"].map(lambda w: MISSING if pd.isna(w) else f"{int(w):,}"),
    })


def figure_link(figpath: Path, report_path: Path) -> str:
    return Path(os.path.relpath(figpath, report_path.parent)).as_posix()


def build_report(
    dialogue: pd.DataFrame,
    word_counts: pd.DataFrame,
    lemma_counts: pd.DataFrame,
    coverage: pd.DataFrame,
    speakers: pd.DataFrame,
    figpath: Path,
    report_path: Path,
    show_name: str = "the show",
    top_n: int = TOP_N,
) -> str:
    lines = []
    lines.append(f"# How many words do you need to know to watch {show_name}?\n")
    total = int(lemma_counts["count"].sum()) if not lemma_counts.empty else 0
    lines.append(
        f"{len(dialogue):,} dialogue lines, {total:,} words, "
        f"{len(word_counts):,} distinct words, {len(lemma_counts):,} distinct lemmas.\n"
    )

    lines.append("## Dialogue lines (first rows)\n")
    lines.append(md_table(dialogue[["speaker", "text"]] if not dialogue.empty else dialogue, max_rows=PREVIEW_ROWS))

    lines.append("## Most frequent words\n")
    lines.append(md_table(ranked_words(word_counts, TOP_TABLE_ROWS), max_rows=TOP_TABLE_ROWS))

    lines.append("## Most frequent lemmas\n")
    lines.append(md_table(ranked_words(lemma_counts, TOP_TABLE_ROWS), max_rows=TOP_TABLE_ROWS))

    lines.append("## Words needed for coverage\n")
    lines.append(md_table(coverage_display(coverage), max_rows=len(coverage)))

    lines.append("## Cumulative distribution\n")
    if figpath.exists():
        lines.append(f"![Cumulative distribution of words]({figure_link(figpath, report_path)})\n")
    else:
        lines.append(f"_(missing figure: {figpath.name})_\n")

    lines.append("## Speakers\n")
    lines.append(md_table(speakers, max_rows=TOP_TABLE_ROWS))

    lines.append(f"## Top {top_n} lemmas\n")
    lines.append(md_table(ranked_words(lemma_counts, top_n), max_rows=top_n))

    return "\n".join(lines)


def write_top_words_xlsx(table: pd.DataFrame, outpath: Path, sheet_name: str = "top_words") -> Path:
    outpath.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(outpath, engine="openpyxl") as writer:
        table.to_excel(writer, sheet_name=sheet_name, index=False)
        ws = writer.sheets[sheet_name]
        ws.auto_filter.ref = ws.dimensions
        ws.freeze_panes = "A2"
        ws.column_dimensions["C"].width = 20
        ws.column_dimensions["D"].width = 22
    return outpath


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--dialogue_parquet", default="vocab_out/dialogue_lines.parquet")
    ap.add_argument("--indir", default="analysis")
    ap.add_argument("--figure", default="analysis/figures/cumulative_coverage.png")
    ap.add_argument("--out", default="analysis/report.md")
    ap.add_argument("--xlsx", default="analysis/top_words.xlsx")
    ap.add_argument("--show_name", default="the show")
    ap.add_argument("--top_n", type=int, default=TOP_N, help="Rows in the ranked lemma list")
    args = ap.parse_args()

    indir = Path(args.indir)
    out = Path(args.out)

    dialogue = pd.read_parquet(args.dialogue_parquet)
    word_counts = pd.read_csv(indir / "word_counts.csv", keep_default_na=False)
    lemma_counts = pd.read_csv(indir / "lemma_counts.csv", keep_default_na=False)
    coverage = pd.read_csv(indir / "words_for_prop.csv")
    coverage["words"] = coverage["words"].astype("Int64")
    speakers = pd.read_csv(indir / "speaker_summary.csv")

    report = build_report(
        dialogue, word_counts, lemma_counts, coverage, speakers,
        figpath=Path(args.figure),
        report_path=out,
        show_name=args.show_name,
        top_n=args.top_n,
    )
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(report, encoding="utf-8")

    xlsx = write_top_words_xlsx(ranked_words(lemma_counts, args.top_n), Path(args.xlsx))

    print(f"Wrote: {out}")
    print(f"Wrote: {xlsx}")


if __name__ == "__main__":
    main()
