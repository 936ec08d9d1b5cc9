from __future__ import annotations

import random
from typing import Iterable

from .errors import WordCorpusError


DEFAULT_WORDS = [
    "apple",
    "bridge",
    "rocket",
    "guitar",
    "elephant",
    "butterfly",
    "mountain",
    "rainbow",
    "pizza",
    "camera",
]

MASK_CHAR = "_"


def mask_word(word: str) -> list[str]:
    return [ch if ch == " " else MASK_CHAR for ch in word]


class WordProvider:
    """Uniform random pick (with replacement) from a fixed corpus."""

    def __init__(self, words: Iterable[str] | None = None, rng: random.Random | None = None) -> None:
        corpus = [w.strip() for w in (DEFAULT_WORDS if words is None else words) if w and w.strip()]
        if not corpus:
            raise WordCorpusError()
        self._words = corpus
        self._rng = rng or random.Random()

    @property
    def words(self) -> list[str]:
        return list(self._words)

    def pick(self) -> tuple[str, list[str]]:
        word = self._rng.choice(self._words)
        return word, mask_word(word)
