#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd
import matplotlib.pyplot as plt


LINE_COLOR = "#2980b9"
GUIDE_COLOR = "#2c3e50"
EXTRA_X_BREAKS = (7500, 10000)
BASE_Y_BREAKS = (0, 25, 50, 75)


def defined_coverage(coverage: pd.DataFrame) -> pd.DataFrame:
    """Coverage rows with a word count, as plain ints/floats."""
    cov = coverage.dropna(subset=["words"]).copy()
    cov["words"] = cov["words"].astype(int)
    cov["pct"] = cov["prop"].astype(float) * 100
    return cov


def coverage_title(coverage: pd.DataFrame, show_name: str, prop: float = 0.9) -> str:
    row = coverage[(coverage["prop"] - prop).abs() < 1e-9]
    pct = f"{prop:.0%}"
    if row.empty or pd.isna(row["words"].iloc[0]):
        return f"Words needed to know {pct} of all the words used in {show_name}"
    n = int(row["words"].iloc[0])
    return f"You need to know around {n} words to know {pct} of all the words used in {show_name}"


def x_breaks(coverage: pd.DataFrame, max_rank: int) -> List[int]:
    ticks = set(defined_coverage(coverage)["words"])
    ticks.update(b for b in EXTRA_X_BREAKS if b <= max_rank)
    return sorted(ticks)


def y_breaks(coverage: pd.DataFrame) -> List[float]:
    ticks = set(float(b) for b in BASE_Y_BREAKS)
    ticks.update(defined_coverage(coverage)["pct"])
    return sorted(ticks)


def plot_coverage_curve(
    counts: pd.DataFrame,
    coverage: pd.DataFrame,
    title: str,
    outpath: Path,
    caption: Optional[str] = None,
    show: bool = False,
) -> Path:
    if counts.empty:
        raise ValueError("Frequency table is empty; nothing to plot.")

    cov = defined_coverage(coverage)

    plt.figure(figsize=(12, 6))
    plt.plot(counts["rank"], counts["cum_prop"] * 100, color=LINE_COLOR, linewidth=1.5)

    for _, row in cov.iterrows():
        plt.plot([row["words"], row["words"]], [0, row["pct"]], linestyle="--", color=GUIDE_COLOR, linewidth=1)
        plt.plot([0, row["words"]], [row["pct"], row["pct"]], linestyle="--", color=GUIDE_COLOR, linewidth=1)
    # white ring under the dark marker
    plt.scatter(cov["words"], cov["pct"], color="white", s=60, zorder=3)
    plt.scatter(cov["words"], cov["pct"], color=GUIDE_COLOR, s=25, zorder=4)

    yt = y_breaks(coverage)
    plt.yticks(yt, [f"{y:g}%" for y in yt])
    plt.xticks(x_breaks(coverage, int(counts["rank"].max())))
    plt.margins(x=0.01, y=0.01)

    ax = plt.gca()
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    plt.title(title)
    plt.xlabel("Words ordered by frequency")
    plt.ylabel("Cumulative percentage")
    if caption:
        plt.figtext(0.99, 0.01, caption, ha="right", va="bottom", fontsize=7)
    plt.tight_layout()

    outpath.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(outpath, dpi=200)
    if show:
        plt.show()
    plt.close()
    return outpath


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--counts", default="analysis/lemma_counts.csv")
    ap.add_argument("--coverage", default="analysis/words_for_prop.csv")
    ap.add_argument("--figdir", default="analysis/figures")
    ap.add_argument("--show_name", default="the show", help="Used in the chart title")
    ap.add_argument("--caption", default="", help="Source/credits line under the chart")
    ap.add_argument("--show", action="store_true", help="Also open the chart window")
    args = ap.parse_args()

    counts = pd.read_csv(args.counts)
    coverage = pd.read_csv(args.coverage)
    coverage["words"] = coverage["words"].astype("Int64")

    outpath = plot_coverage_curve(
        counts,
        coverage,
        title=coverage_title(coverage, args.show_name),
        outpath=Path(args.figdir) / "cumulative_coverage.png",
        caption=args.caption or None,
        show=args.show,
    )
    print("Saved figure to:", outpath)


if __name__ == "__main__":
    main()
