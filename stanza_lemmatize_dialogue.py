#!/usr/bin/env python3
"""
Stanza lemmatizer for TV show dialogue transcripts.

Reads a plain-text transcript (one record per line), keeps the spoken lines,
splits them into lowercase word tokens and lemmatizes every token.

Outputs (always produced in primary format):
  1) dialogue_lines   one row per spoken line   (line_id, speaker, text)
  2) token_level      one row per word token    (line_id, speaker, word_id, word, lemma)

Primary output format defaults to Parquet.
You can additionally request extra shareable formats (csv/tsv/jsonl).

python stanza_lemmatize_dialogue.py \
  --input scripts.txt \
  --outdir vocab_out \
  --extra csv

Stanza models are not fetched implicitly; pass --download_models once.
"""

from __future__ import annotations

import argparse
import logging
import re
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import pandas as pd
from tqdm import tqdm

import stanza


logger = logging.getLogger(__name__)

# Scene headings are dropped before any other cleaning
STAGE_DIRECTION_PREFIXES = ("INT.",)

PAREN_RE = re.compile(r"\(.*?\)")
BRACKET_RE = re.compile(r"\[.*?\]")

# Uppercase speaker, colon, at least one character of speech.
# The speech keeps its leading whitespace.
SPEAKER_LINE_RE = re.compile(r"^([A-Z]+):(.+)$")

# Letters/digits, with apostrophes allowed inside a word (don't, jerry's)
WORD_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")

LEMMA_PROCESSORS = "tokenize,pos,lemma"
LEMMA_BATCH_SIZE = 500

DIALOGUE_COLUMNS = ["line_id", "speaker", "text"]
TOKEN_COLUMNS = ["line_id", "speaker", "word_id", "word", "lemma"]


def read_transcript(path: Path) -> List[str]:
    """Read the transcript as a list of lines. A missing file raises FileNotFoundError."""
    return Path(path).read_text(encoding="utf-8").splitlines()


def clean_line(line: str) -> str:
    """Remove (parenthetical) and [bracketed] asides."""
    line = PAREN_RE.sub("", line)
    return BRACKET_RE.sub("", line)


def iter_dialogue_lines(
    lines: Iterable[str],
    drop_prefixes: Sequence[str] = STAGE_DIRECTION_PREFIXES,
) -> Iterable[Tuple[str, str]]:
    """
    Yield (speaker, text) for every line that looks like `SPEAKER: text`.
    Stage directions, blank lines and anything else are skipped silently.
    """
    prefixes = tuple(drop_prefixes)
    for raw in lines:
        if prefixes and raw.startswith(prefixes):
            continue
        line = clean_line(raw)
        if not line.strip():
            continue
        m = SPEAKER_LINE_RE.match(line)
        if m:
            yield m.group(1), m.group(2)


def extract_dialogue_lines(
    lines: Sequence[str],
    drop_prefixes: Sequence[str] = STAGE_DIRECTION_PREFIXES,
) -> pd.DataFrame:
    rows = [
        {"line_id": i, "speaker": speaker, "text": text}
        for i, (speaker, text) in enumerate(iter_dialogue_lines(lines, drop_prefixes), start=1)
    ]
    logger.info("Kept %d dialogue lines, dropped %d", len(rows), len(lines) - len(rows))
    if not rows:
        return pd.DataFrame(columns=DIALOGUE_COLUMNS)
    return pd.DataFrame(rows, columns=DIALOGUE_COLUMNS)


def tokenize(text: str) -> List[str]:
    return WORD_RE.findall(text.lower())


def stanza_pipeline(lang: str = "en", download: bool = False, use_gpu: bool = False) -> stanza.Pipeline:
    # Input is already split into words by tokenize(), so stanza only tags and lemmatizes
    if download:
        stanza.download(lang, processors=LEMMA_PROCESSORS, verbose=False)
    logger.info("Loading stanza pipeline lang=%s processors=%s", lang, LEMMA_PROCESSORS)
    return stanza.Pipeline(
        lang=lang,
        processors=LEMMA_PROCESSORS,
        tokenize_pretokenized=True,
        use_gpu=use_gpu,
        verbose=False,
        download_method=None,
    )


def token_lemma(token) -> str:
    """Lemma of one stanza token; multi-word tokens and empty lemmas keep the surface form."""
    words = token.words
    if len(words) == 1 and words[0].lemma:
        return words[0].lemma.lower()
    return token.text.lower()


def lemmatize_token_lists(
    token_lists: Sequence[Sequence[str]],
    nlp,
    batch_size: int = LEMMA_BATCH_SIZE,
    progress: bool = True,
) -> List[List[str]]:
    """
    Lemmatize pre-tokenized lines. Each inner list is sent to stanza as one
    sentence so the output lines up one lemma per input token.
    """
    lemma_lists: List[List[str]] = [[] for _ in token_lists]
    pending = [i for i, toks in enumerate(token_lists) if toks]

    for start in tqdm(range(0, len(pending), batch_size), desc="Lemmatizing", disable=not progress):
        batch = pending[start:start + batch_size]
        doc = nlp([list(token_lists[i]) for i in batch])
        if len(doc.sentences) != len(batch):
            raise RuntimeError(
                f"Expected {len(batch)} sentences from stanza, got {len(doc.sentences)}"
            )
        for i, sent in zip(batch, doc.sentences):
            lemmas = [token_lemma(tok) for tok in sent.tokens]
            if len(lemmas) != len(token_lists[i]):
                raise RuntimeError(
                    f"Token count mismatch on line {i}: {len(token_lists[i])} in, {len(lemmas)} out"
                )
            lemma_lists[i] = lemmas

    return lemma_lists


def lemmatize(word: str, nlp) -> str:
    return lemmatize_token_lists([[word]], nlp, progress=False)[0][0]


def build_token_level(dialogue: pd.DataFrame, nlp, batch_size: int = LEMMA_BATCH_SIZE) -> pd.DataFrame:
    token_lists = [tokenize(text) for text in dialogue["text"]]
    lemma_lists = lemmatize_token_lists(token_lists, nlp, batch_size=batch_size)

    rows = []
    for (line_id, speaker), words, lemmas in zip(
        dialogue[["line_id", "speaker"]].itertuples(index=False, name=None), token_lists, lemma_lists
    ):
        for wi, (word, lemma) in enumerate(zip(words, lemmas), start=1):
            rows.append({
                "line_id": line_id,
                "speaker": speaker,
                "word_id": wi,
                "word": word,
                "lemma": lemma,
            })

    if not rows:
        return pd.DataFrame(columns=TOKEN_COLUMNS)
    return pd.DataFrame(rows, columns=TOKEN_COLUMNS)


def ensure_output_dir(outdir: Path) -> None:
    outdir.mkdir(parents=True, exist_ok=True)


OUTPUT_FORMATS = {
    "parquet": (".parquet", lambda df, path: df.to_parquet(path, index=False)),
    "csv": (".csv", lambda df, path: df.to_csv(path, index=False)),
    "tsv": (".tsv", lambda df, path: df.to_csv(path, sep="\t", index=False)),
    "jsonl": (".jsonl", lambda df, path: df.to_json(path, orient="records", lines=True, force_ascii=False)),
}


def write_df(df: pd.DataFrame, path_base: Path, fmt: str) -> Path:
    """Write df next to path_base in the given format and return the path written."""
    try:
        suffix, writer = OUTPUT_FORMATS[fmt.lower()]
    except KeyError:
        raise ValueError(f"Unsupported format: {fmt}. Choose from {sorted(OUTPUT_FORMATS)}") from None
    outpath = path_base.with_suffix(suffix)
    writer(df, outpath)
    return outpath


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", default="scripts.txt", help="Transcript file, UTF-8, one line per record")
    ap.add_argument("--outdir", default="vocab_out", help="Output directory")
    ap.add_argument("--format", default="parquet", choices=sorted(OUTPUT_FORMATS),
                    help="Primary output format (default: parquet)")
    ap.add_argument("--extra", nargs="*", default=[], choices=sorted(OUTPUT_FORMATS),
                    help="Also write additional formats (e.g., --extra csv tsv)")
    ap.add_argument("--drop_prefix", action="append", default=None,
                    help="Stage direction prefix to drop; repeatable (default: INT.)")
    ap.add_argument("--lang", default="en", help="Language for stanza (default: en)")
    ap.add_argument("--batch_size", type=int, default=LEMMA_BATCH_SIZE,
                    help="Lines per stanza call")
    ap.add_argument("--download_models", action="store_true",
                    help="Download the stanza models for --lang before running")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    inpath = Path(args.input)
    outdir = Path(args.outdir)

    lines = read_transcript(inpath)
    drop_prefixes = tuple(args.drop_prefix) if args.drop_prefix else STAGE_DIRECTION_PREFIXES
    dialogue = extract_dialogue_lines(lines, drop_prefixes)
    print(dialogue.head(5).to_string(index=False))

    nlp = stanza_pipeline(args.lang, download=args.download_models)
    tokens = build_token_level(dialogue, nlp, batch_size=args.batch_size)

    ensure_output_dir(outdir)
    primary = args.format.lower()
    extras = [e.lower() for e in args.extra if e.lower() != primary]

    written = [
        write_df(dialogue, outdir / "dialogue_lines", primary),
        write_df(tokens, outdir / "token_level", primary),
    ]
    for fmt in extras:
        written.append(write_df(dialogue, outdir / f"dialogue_lines__{fmt}", fmt))
        written.append(write_df(tokens, outdir / f"token_level__{fmt}", fmt))

    print("Wrote:")
    for path in written:
        print(path)


if __name__ == "__main__":
    main()
