"""Tokenisation and normalisation of document text."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from .corpus import Corpus
from .schemas.config import TokenizerConfig

_URL_RE = r"(?:https?://|www\.)\S+"
_WORD_RE = r"\w+(?:[-'’]\w+)*"
_PUNCT_RE = r"[^\w\s]"
_TOKEN_RE = re.compile(f"(?P<url>{_URL_RE})|(?P<word>{_WORD_RE})|(?P<other>{_PUNCT_RE})")
_NUMBER_RE = re.compile(r"^[\d.,]+$|^\d+(?:st|nd|rd|th)$")
_SENTENCE_RE = re.compile(r"(?<=[.!?;])\s+(?=\S)")


def _stopword_set(config: TokenizerConfig) -> frozenset[str]:
    if config.stopwords is None:
        return frozenset()
    if config.stopwords == "english":
        return frozenset(ENGLISH_STOP_WORDS)
    return frozenset(word.lower() for word in config.stopwords)


def _is_punct(token: str) -> bool:
    return unicodedata.category(token[0]).startswith("P")


def tokenize(text: str | None, config: TokenizerConfig | None = None) -> tuple[str, ...]:
    """Split ``text`` into normalised tokens.

    Empty or whitespace-only input yields an empty tuple.
    """
    if not text or not text.strip():
        return ()
    config = config or TokenizerConfig()
    stopwords = _stopword_set(config)

    tokens: list[str] = []
    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        token = match.group()
        if kind == "url":
            if config.remove_urls:
                continue
        elif kind == "other":
            if _is_punct(token):
                if config.remove_punct:
                    continue
            elif config.remove_symbols:
                continue
        elif config.remove_numbers and _NUMBER_RE.match(token):
            continue

        if config.lowercase:
            token = token.lower()
        if token.lower() in stopwords:
            continue
        if len(token) < config.min_length:
            continue
        tokens.append(token)
    return tuple(tokens)


def tokenize_all(texts: Iterable[str], config: TokenizerConfig | None = None) -> list[tuple[str, ...]]:
    config = config or TokenizerConfig()
    return [tokenize(text, config) for text in texts]


def tokenize_corpus(corpus: Corpus, config: TokenizerConfig | None = None) -> dict[str, tuple[str, ...]]:
    """Token streams keyed by document id, in corpus order."""
    return dict(zip(corpus.ids(), tokenize_all(corpus.texts(), config)))


def split_sentences(text: str | None) -> list[str]:
    """Split text on terminal punctuation, dropping empty fragments."""
    if not text or not text.strip():
        return []
    return [part.strip() for part in _SENTENCE_RE.split(text.strip()) if part.strip()]
