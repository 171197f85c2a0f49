"""Tests for tokenisation and sentence splitting."""

from scaleflow.schemas.config import TokenizerConfig
from scaleflow.tokens import split_sentences, tokenize


def test_tokenize_default_normalisation() -> None:
    tokens = tokenize("The Parliament CONDEMNS the 2021 crackdown, https://europa.eu!")

    assert tokens == ("parliament", "condemns", "crackdown")


def test_tokenize_empty_and_whitespace_text() -> None:
    assert tokenize("") == ()
    assert tokenize("   \n\t ") == ()
    assert tokenize(None) == ()


def test_tokenize_keeps_requested_categories() -> None:
    config = TokenizerConfig(
        lowercase=False,
        remove_punct=False,
        remove_numbers=False,
        remove_symbols=False,
        stopwords=None,
    )

    tokens = tokenize("EU-China trade: €5 billion in 2020.", config)

    assert tokens == ("EU-China", "trade", ":", "€", "5", "billion", "in", "2020", ".")


def test_tokenize_custom_stopwords_and_min_length() -> None:
    config = TokenizerConfig(stopwords=["resolution"], min_length=3)

    assert tokenize("This resolution is on Hong Kong", config) == ("this", "hong", "kong")


def test_tokenize_is_restartable() -> None:
    tokens = tokenize("sanctions and dialogue")

    assert list(tokens) == list(tokens)


def test_split_sentences() -> None:
    text = "Parliament condemns the arrests. It calls for release! Does it act?  "

    assert split_sentences(text) == [
        "Parliament condemns the arrests.",
        "It calls for release!",
        "Does it act?",
    ]
    assert split_sentences("  ") == []
