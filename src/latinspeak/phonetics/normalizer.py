"""Text normalization applied before fingerprinting and transliteration."""

import unicodedata


def normalize(raw: str) -> str:
    """Clean raw Latin text into its normalized form.

    Lower-cases, composes combining diacritics (so macron vowels become single
    code points), drops everything that is neither a letter nor whitespace and
    collapses whitespace runs to single spaces.

    The result is stable: ``normalize(normalize(s)) == normalize(s)``.

    Args:
        raw: Arbitrary input text

    Returns:
        Normalized text, possibly empty
    """
    text = unicodedata.normalize("NFC", raw).lower()

    # Combining marks left over after composition are not letters and drop out
    kept = "".join(ch for ch in text if ch.isalpha() or ch.isspace())
    collapsed = " ".join(kept.split())

    # Removing characters can bring composable letters together again
    return unicodedata.normalize("NFC", collapsed)
