"""Classical and Ecclesiastical rule sets.

Both dialects share one pipeline shape; only the tables and the stress
placer differ. Stage order is load-bearing:

1. vowel length
2. diphthongs
3. consonant clusters (most specific rule first)
4. remaining single consonants
5. nasal assimilation
6. vowels
7. stress
"""

import logging
from dataclasses import dataclass
from functools import reduce

from ..dialects import Dialect
from .stages import (
    ASPIRATED,
    LONG,
    LABIALIZED,
    OFFGLIDE,
    Stage,
    StressStage,
    classical_stress,
    diphthong_stage,
    ecclesiastical_stress,
    geminate_rule,
    nasal_assimilation_stage,
    rule_stage,
    table_stage,
    vowel_length_stage,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleSet:
    """Ordered stage list for one dialect."""

    dialect: Dialect
    stages: tuple[Stage, ...]

    def apply(self, text: str) -> str:
        return reduce(lambda acc, stage: stage(acc), self.stages, text)

    def trace(self, text: str) -> list[tuple[str, str]]:
        """Run the pipeline and record the output of every stage."""
        steps = []
        for stage in self.stages:
            text = stage(text)
            steps.append((stage.name, text))
            logger.debug(f"[{self.dialect.value}] {stage.name}: {text}")
        return steps


CLASSICAL_DIPHTHONGS = [
    ("ae", f"ae{OFFGLIDE}"),
    ("æ", f"ae{OFFGLIDE}"),
    ("au", f"au{OFFGLIDE}"),
    ("ei", f"ei{OFFGLIDE}"),
    ("eu", f"eu{OFFGLIDE}"),
    ("oe", f"oe{OFFGLIDE}"),
    ("œ", f"oe{OFFGLIDE}"),
    # "qu" owns its u
    ("(?<!q)ui", f"ui{OFFGLIDE}"),
]

ECCLESIASTICAL_DIPHTHONGS = [
    ("ae", "e"),
    ("æ", "e"),
    ("au", f"au{OFFGLIDE}"),
    ("ei", f"ei{OFFGLIDE}"),
    ("eu", f"eu{OFFGLIDE}"),
    ("oe", "e"),
    ("œ", "e"),
]

CLASSICAL_CLUSTERS = [
    ("qu(?=[aeiouy])", f"k{LABIALIZED}"),
    ("ph", f"p{ASPIRATED}"),
    ("th", f"t{ASPIRATED}"),
    ("ch", f"k{ASPIRATED}"),
    geminate_rule(keep_length=True),
    ("x", "ks"),
    ("z", "dz"),
]

ECCLESIASTICAL_CLUSTERS = [
    # Length is not phonemic in church pronunciation
    (LONG, ""),
    ("gn", "ɲ"),
    ("gl(?=i)", "ʎ"),
    ("sc(?=[eiy])", "ʃ"),
    ("ti(?=[aeiou])", "tsi"),
    ("qu(?=[aeiouy])", "kw"),
    ("ch", "k"),
    ("ph", "f"),
    ("th", "t"),
    # Soft geminates collapse together with the softening
    ("cc(?=[eiy])", "tʃ"),
    ("gg(?=[eiy])", "dʒ"),
    ("c(?=[eiy])", "tʃ"),
    ("g(?=[eiy])", "dʒ"),
    geminate_rule(keep_length=False),
    ("x", "ks"),
    ("z", "dz"),
]

CLASSICAL_CONSONANTS = {
    "b": "b",
    "c": "k",
    "d": "d",
    "f": "f",
    "g": "g",
    "h": "h",
    "j": "j",
    "k": "k",
    "l": "l",
    "m": "m",
    "n": "n",
    "p": "p",
    "q": "k",
    "r": "r",
    "s": "s",
    "t": "t",
    "v": "w",
    "w": "w",
}

ECCLESIASTICAL_CONSONANTS = {**CLASSICAL_CONSONANTS, "v": "v"}

CLASSICAL_VOWELS = {"a": "a", "e": "e", "i": "i", "o": "o", "u": "u", "y": "y"}

ECCLESIASTICAL_VOWELS = {**CLASSICAL_VOWELS, "y": "i"}


CLASSICAL = RuleSet(
    dialect=Dialect.CLASSICAL,
    stages=(
        vowel_length_stage(),
        diphthong_stage(CLASSICAL_DIPHTHONGS),
        rule_stage("clusters", CLASSICAL_CLUSTERS),
        table_stage("consonants", CLASSICAL_CONSONANTS),
        nasal_assimilation_stage(),
        table_stage("vowels", CLASSICAL_VOWELS),
        StressStage("stress", classical_stress),
    ),
)

ECCLESIASTICAL = RuleSet(
    dialect=Dialect.ECCLESIASTICAL,
    stages=(
        vowel_length_stage(),
        diphthong_stage(ECCLESIASTICAL_DIPHTHONGS),
        rule_stage("clusters", ECCLESIASTICAL_CLUSTERS),
        table_stage("consonants", ECCLESIASTICAL_CONSONANTS),
        nasal_assimilation_stage(),
        table_stage("vowels", ECCLESIASTICAL_VOWELS),
        StressStage("stress", ecclesiastical_stress),
    ),
)

RULESETS = {ruleset.dialect: ruleset for ruleset in (CLASSICAL, ECCLESIASTICAL)}


def get_ruleset(dialect: Dialect | str) -> RuleSet:
    return RULESETS[Dialect.parse(dialect)]
