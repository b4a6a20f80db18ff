"""Latin grapheme-to-IPA transliteration."""

import logging

from ..dialects import Dialect
from .normalizer import normalize
from .rulesets import get_ruleset

logger = logging.getLogger(__name__)


def transliterate(text: str, dialect: Dialect | str) -> str:
    """Convert Latin text to an IPA transcript for the given dialect.

    The input is normalized first, so raw text is accepted too. Characters the
    rule tables do not know pass through unchanged; the function never fails
    on text input.

    Args:
        text: Latin text (raw or already normalized)
        dialect: Pronunciation system to apply

    Returns:
        IPA transcript with stress marks, words separated by single spaces

    Raises:
        ValueError: If dialect is not a known dialect
    """
    ruleset = get_ruleset(dialect)
    transcript = ruleset.apply(normalize(text))
    logger.debug(f"{ruleset.dialect.value} IPA for '{text[:50]}': {transcript}")
    return transcript


def phonetic_examples(text: str) -> dict[str, str]:
    """Return the transcript of text in every dialect, keyed by dialect name."""
    return {dialect.value: transliterate(text, dialect) for dialect in Dialect}
