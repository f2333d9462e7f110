import sys

import pandas as pd
import pytest

import plot_coverage_curve as pcc
from word_coverage_stats import add_cumulative_stats, words_for_prop_table


def _counts(n_words=12000):
    # word i appears (n_words - i) // 1000 + 1 times, so ranks run past the extra x breaks
    tokens = [f"w{i}" for i in range(n_words) for _ in range((n_words - i) // 1000 + 1)]
    return add_cumulative_stats(tokens)


def _coverage(words, props=(0.98, 0.95, 0.9, 0.5)):
    return pd.DataFrame({"prop": list(props), "words": pd.array(words, dtype="Int64")})


def test_title_uses_ninety_percent_row():
    cov = _coverage([9000, 7000, 1140, 60])
    assert pcc.coverage_title(cov, "Seinfeld") == (
        "You need to know around 1140 words to know 90% of all the words used in Seinfeld"
    )


def test_title_without_ninety_percent_value():
    cov = _coverage([None, None, None, 1])
    assert pcc.coverage_title(cov, "Seinfeld") == (
        "Words needed to know 90% of all the words used in Seinfeld"
    )


def test_x_breaks_skip_missing_and_out_of_range():
    cov = _coverage([None, 5000, 1140, 60])
    assert pcc.x_breaks(cov, max_rank=8000) == [60, 1140, 5000, 7500]
    assert pcc.x_breaks(cov, max_rank=20000) == [60, 1140, 5000, 7500, 10000]


def test_y_breaks_add_targets():
    cov = _coverage([None, 5000, 1140, 60])
    assert pcc.y_breaks(cov) == pytest.approx([0, 25, 50, 75, 90, 95])


def test_plot_writes_png(tmp_path):
    counts = _counts()
    cov = words_for_prop_table(counts)
    out = pcc.plot_coverage_curve(
        counts, cov, title=pcc.coverage_title(cov, "the show"),
        outpath=tmp_path / "figures" / "cumulative_coverage.png",
        caption="Transcripts: example",
    )
    assert out.exists()
    assert out.stat().st_size > 0


def test_plot_handles_missing_targets(tmp_path):
    counts = add_cumulative_stats(["a", "b"])
    cov = words_for_prop_table(counts, [1.0, 0.5])
    assert pd.isna(cov["words"].iloc[0])
    out = pcc.plot_coverage_curve(counts, cov, title="t", outpath=tmp_path / "c.png")
    assert out.exists()


def test_plot_rejects_empty_table(tmp_path):
    with pytest.raises(ValueError):
        pcc.plot_coverage_curve(add_cumulative_stats([]), _coverage([], props=()), title="t", outpath=tmp_path / "c.png")


def test_main_reads_csv_outputs(tmp_path, monkeypatch):
    counts = add_cumulative_stats(["a"] * 5 + ["b"] * 3 + ["c"])
    cov = words_for_prop_table(counts)
    counts.to_csv(tmp_path / "lemma_counts.csv", index=False)
    cov.to_csv(tmp_path / "words_for_prop.csv", index=False)

    monkeypatch.setattr(sys, "argv", [
        "plot_coverage_curve.py",
        "--counts", str(tmp_path / "lemma_counts.csv"),
        "--coverage", str(tmp_path / "words_for_prop.csv"),
        "--figdir", str(tmp_path / "figures"),
        "--show_name", "Seinfeld",
    ])
    pcc.main()
    assert (tmp_path / "figures" / "cumulative_coverage.png").exists()
