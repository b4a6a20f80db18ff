"""Latin text normalization and grapheme-to-IPA transliteration."""

from .normalizer import normalize
from .rulesets import CLASSICAL, ECCLESIASTICAL, RuleSet, get_ruleset
from .transducer import phonetic_examples, transliterate

__all__ = [
    "CLASSICAL",
    "ECCLESIASTICAL",
    "RuleSet",
    "get_ruleset",
    "normalize",
    "phonetic_examples",
    "transliterate",
]
