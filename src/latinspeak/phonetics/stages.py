"""Building blocks for the grapheme-to-IPA rule pipeline.

A pipeline is an ordered tuple of stages. Every stage is a pure
``(text) -> text`` callable, so each one can be exercised on its own and the
transducer simply folds the input through them. Two kinds exist:

- ``RuleStage``: an ordered list of regex substitutions applied in sequence.
- ``StressStage``: a per-word function run on whitespace-separated tokens.

Markers introduced by earlier stages (length ``ː``, non-syllabic ``◌̯``,
aspiration ``ʰ``, labialization ``ʷ``) are never letters, so later letter
patterns cannot match inside them.
"""

import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import reduce

LONG = "ː"
OFFGLIDE = "\u032f"  # combining inverted breve below
STRESS = "ˈ"
ASPIRATED = "ʰ"
LABIALIZED = "ʷ"

MACRON_VOWELS = {"ā": "a", "ē": "e", "ī": "i", "ō": "o", "ū": "u", "ȳ": "y"}
GEMINABLE = "bcdfglmnprst"

# Symbols that belong to the preceding segment and must stay attached to it
MODIFIERS = frozenset({LONG, OFFGLIDE, ASPIRATED, LABIALIZED})
AFFRICATE_TAILS = {"ʃ": "t", "ʒ": "d"}
IPA_VOWELS = frozenset("aeiouy")

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class Rule:
    """One regex substitution."""

    pattern: re.Pattern[str]
    replacement: Replacement

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


@dataclass(frozen=True)
class RuleStage:
    """Named, ordered group of substitutions.

    Rules run one after another over the whole string, so a rule listed
    earlier wins over a later, shorter rule that would match the same letters.
    """

    name: str
    rules: tuple[Rule, ...]

    def __call__(self, text: str) -> str:
        return reduce(lambda acc, rule: rule.apply(acc), self.rules, text)


@dataclass(frozen=True)
class StressStage:
    """Applies a stress placer to every whitespace-separated word."""

    name: str
    place: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return " ".join(self.place(word) for word in text.split(" ") if word)


Stage = RuleStage | StressStage


def rule(pattern: str, replacement: Replacement) -> Rule:
    return Rule(re.compile(pattern), replacement)


def rule_stage(name: str, rules: Iterable[tuple[str, Replacement]]) -> RuleStage:
    """Compile ``(pattern, replacement)`` pairs into a stage, keeping their order."""
    return RuleStage(name, tuple(rule(p, r) for p, r in rules))


def table_stage(name: str, table: Mapping[str, str]) -> RuleStage:
    """Single-pass letter-for-symbol mapping.

    All letters are rewritten in one scan so the output of one entry is never
    fed to another entry.
    """
    letters = "".join(sorted(table))
    pattern = f"[{re.escape(letters)}]"
    return rule_stage(name, [(pattern, lambda m: table[m.group(0)])])


# --- stage builders ---------------------------------------------------------


def vowel_length_stage() -> RuleStage:
    """Rewrite macron vowels as base vowel plus length marker."""
    return rule_stage(
        "vowel_length",
        [(re.escape(macron), base + LONG) for macron, base in MACRON_VOWELS.items()],
    )


def diphthong_stage(table: Iterable[tuple[str, str]]) -> RuleStage:
    """Fold two-letter vowel sequences.

    A sequence whose second vowel already carries a length marker is a long
    vowel in hiatus, not a diphthong, and is left alone.
    """
    return rule_stage(
        "diphthongs", [(f"{pattern}(?!{LONG})", ipa) for pattern, ipa in table]
    )


def geminate_rule(keep_length: bool) -> tuple[str, Replacement]:
    """Doubled consonant to a single consonant, with or without ``ː``."""
    replacement = r"\1" + (LONG if keep_length else "")
    return (f"([{GEMINABLE}])\\1", replacement)


def nasal_assimilation_stage() -> RuleStage:
    return rule_stage(
        "nasal_assimilation",
        [
            ("n(?=[kgŋ])", "ŋ"),
            ("n(?=[pb])", "m"),
        ],
    )


# --- stress -----------------------------------------------------------------


def _snap_stress_position(word: str, pos: int) -> int:
    """Move an approximate stress index back onto a segment boundary.

    Keeps the mark out of the middle of a diphthong, off the front of a
    length/aspiration/offglide modifier and off the second half of an
    affricate.
    """
    while 0 < pos < len(word):
        ch = word[pos]
        if ch in MODIFIERS:
            pos -= 1
        elif AFFRICATE_TAILS.get(ch) == word[pos - 1]:
            pos -= 1
        elif (
            ch in IPA_VOWELS
            and word[pos - 1] in IPA_VOWELS
            and word[pos + 1 : pos + 2] == OFFGLIDE
        ):
            pos -= 1
        else:
            break
    return pos


def _insert_stress(word: str, pos: int) -> str:
    pos = _snap_stress_position(word, pos)
    return word[:pos] + STRESS + word[pos:]


def classical_stress(word: str) -> str:
    """Approximate Classical stress.

    Short words and words with a single vowel take initial stress; longer
    words take the mark at 40% of their length. This stands in for the
    heavy-penult rule without syllabifying.
    """
    if len(word) <= 3:
        return STRESS + word
    if sum(ch in IPA_VOWELS for ch in word) <= 1:
        return STRESS + word
    return _insert_stress(word, math.floor(len(word) * 0.4))


def ecclesiastical_stress(word: str) -> str:
    """Approximate Italianate penultimate stress at 60% of the word length."""
    if len(word) <= 3:
        return STRESS + word
    return _insert_stress(word, max(1, math.floor(len(word) * 0.6)))
