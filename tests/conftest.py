from __future__ import annotations

from types import SimpleNamespace

import matplotlib

matplotlib.use("Agg")

import pytest


SCENARIO_LINES = [
    "JERRY: hello hello world",
    "INT. APARTMENT",
    "(laughs)",
    "GEORGE: world world world",
]


class FakeLemmaPipeline:
    """Stands in for a pretokenized stanza.Pipeline: looks lemmas up in a dict."""

    def __init__(self, lemmas=None):
        self.lemmas = dict(lemmas or {})
        self.calls = []

    def __call__(self, sentences):
        self.calls.append(sentences)
        return SimpleNamespace(sentences=[
            SimpleNamespace(tokens=[self._token(w) for w in sent]) for sent in sentences
        ])

    def _token(self, text):
        return SimpleNamespace(text=text, words=[SimpleNamespace(text=text, lemma=self.lemmas.get(text, text))])


@pytest.fixture
def scenario_lines():
    return list(SCENARIO_LINES)


@pytest.fixture
def fake_nlp():
    return FakeLemmaPipeline({
        "running": "run",
        "ran": "run",
        "was": "be",
        "is": "be",
        "mice": "mouse",
        "better": "good",
    })


@pytest.fixture
def make_nlp():
    return FakeLemmaPipeline
