"""Scoring strategies: Wordscores, Wordfish, LSS and lexicon lookup."""

from .base import ScoreResult, ScoringInput, ScoringStrategy
from .lexicon import Lexicon, LexiconStrategy, load_lexicon, score_tokens
from .lss import LSSStrategy, fit_lss, predict_lss
from .wordfish import WordfishStrategy, fit_wordfish
from .wordscores import WordscoresStrategy, fit_wordscores, predict_wordscores

__all__ = [
    "LSSStrategy",
    "Lexicon",
    "LexiconStrategy",
    "ScoreResult",
    "ScoringInput",
    "ScoringStrategy",
    "WordfishStrategy",
    "WordscoresStrategy",
    "fit_lss",
    "fit_wordfish",
    "fit_wordscores",
    "load_lexicon",
    "predict_lss",
    "predict_wordscores",
    "score_tokens",
]
