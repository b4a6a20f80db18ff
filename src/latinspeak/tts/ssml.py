"""SSML markup carrying IPA pronunciation hints."""

from xml.sax.saxutils import escape, quoteattr


def prosody_rate(speed: float) -> str:
    if speed == 1.0:
        return "medium"
    return "slow" if speed < 1.0 else "fast"


def phoneme_markup(text: str, transcript: str) -> str:
    """Wrap every word of text in a ``<phoneme>`` tag with its IPA.

    The transcript must come from the same normalized text, so both split
    into the same number of words. If they do not, the plain text is
    returned escaped, without hints.
    """
    words = text.split(" ")
    phonemes = transcript.split(" ")
    if len(words) != len(phonemes):
        return escape(text)
    return " ".join(
        f'<phoneme alphabet="ipa" ph={quoteattr(ipa)}>{escape(word)}</phoneme>'
        for word, ipa in zip(words, phonemes)
    )


def build_ssml(text: str, transcript: str, speed: float = 1.0) -> str:
    """Full SSML document for text with per-word IPA hints."""
    return (
        '<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" xml:lang="la">'
        f'<prosody rate="{prosody_rate(speed)}" pitch="medium">'
        f"{phoneme_markup(text, transcript)}"
        "</prosody></speak>"
    )
