"""Unit tests for the Classical and Ecclesiastical transducers."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from latinspeak.dialects import Dialect
from latinspeak.phonetics import (
    CLASSICAL,
    ECCLESIASTICAL,
    get_ruleset,
    phonetic_examples,
    transliterate,
)
from latinspeak.phonetics.stages import LONG, OFFGLIDE, STRESS


class TestDialectDivergence:
    """Test that the two rule sets produce their distinguishing features."""

    def test_cena_hard_c_versus_affricate(self) -> None:
        """
        INVARIANT: Classical c is always /k/, Ecclesiastical c before e is /tʃ/
        BREAKS: Learners hear the wrong dialect
        """
        classical = transliterate("cena", Dialect.CLASSICAL)
        ecclesiastical = transliterate("cena", Dialect.ECCLESIASTICAL)

        assert classical == "kˈena"
        assert ecclesiastical == "tʃeˈna"
        assert "tʃ" not in classical
        assert classical != ecclesiastical

    def test_caelum_diphthong_versus_monophthong(self) -> None:
        """
        INVARIANT: Classical ae keeps its offglide, Ecclesiastical ae is plain e
        BREAKS: Diphthongs collapse in Classical or survive in church Latin
        """
        classical = transliterate("caelum", "classical")
        ecclesiastical = transliterate("caelum", "ecclesiastical")

        assert f"ae{OFFGLIDE}" in classical
        assert classical == f"kˈae{OFFGLIDE}lum"
        assert ecclesiastical == "tʃeˈlum"
        assert "a" not in ecclesiastical

    def test_sentence(self) -> None:
        assert transliterate("Puella amat", Dialect.CLASSICAL) == f"puˈel{LONG}a aˈmat"
        assert transliterate("Puella amat", Dialect.ECCLESIASTICAL) == "pueˈla amˈat"

    def test_v_is_w_in_classical(self) -> None:
        assert "w" in transliterate("vīta", Dialect.CLASSICAL)
        assert "v" in transliterate("vīta", Dialect.ECCLESIASTICAL)

    def test_vowel_length_only_in_classical(self) -> None:
        assert f"e{LONG}" in transliterate("rēx", Dialect.CLASSICAL)
        assert LONG not in transliterate("rēx", Dialect.ECCLESIASTICAL)

    def test_long_vowel_in_hiatus_is_not_folded(self) -> None:
        """
        INVARIANT: A macron keeps two adjacent vowels apart in both dialects
        BREAKS: poēta is spoken as a two-syllable word
        """
        assert transliterate("poēta", Dialect.ECCLESIASTICAL) == f"poe{STRESS}ta"
        assert transliterate("aēr", Dialect.ECCLESIASTICAL) == f"{STRESS}aer"
        assert transliterate("poēta", Dialect.CLASSICAL) == f"po{STRESS}e{LONG}ta"

    def test_unmarked_diphthong_still_folds_in_ecclesiastical(self) -> None:
        assert "o" not in transliterate("poena", Dialect.ECCLESIASTICAL)

    def test_qu_labialized(self) -> None:
        assert transliterate("qui", Dialect.CLASSICAL) == f"{STRESS}kʷi"
        assert transliterate("qui", Dialect.ECCLESIASTICAL) == f"{STRESS}kwi"

    def test_aspirates(self) -> None:
        classical = transliterate("philosophia", Dialect.CLASSICAL)
        ecclesiastical = transliterate("philosophia", Dialect.ECCLESIASTICAL)

        assert classical.count("pʰ") == 2
        assert "ʰ" not in ecclesiastical
        assert ecclesiastical.count("f") == 2


class TestEcclesiasticalClusters:
    """Test Italianate consonant clusters."""

    @pytest.mark.parametrize(
        "word, expected",
        [
            ("agnus", "ɲ"),
            ("scientia", "ʃ"),
            ("gratia", "tsi"),
            ("ecce", "tʃ"),
            ("gens", "dʒ"),
        ],
    )
    def test_cluster(self, word: str, expected: str) -> None:
        assert expected in transliterate(word, Dialect.ECCLESIASTICAL)

    def test_classical_keeps_spelling_values(self) -> None:
        assert "ɲ" not in transliterate("agnus", Dialect.CLASSICAL)
        assert "ti" in transliterate("gratia", Dialect.CLASSICAL)

    def test_nasal_before_velar(self) -> None:
        assert "ŋk" in transliterate("ancora", Dialect.CLASSICAL)
        assert "ŋk" in transliterate("ancora", Dialect.ECCLESIASTICAL)


class TestTransliterateEdgeCases:
    """Test input handling that never fails."""

    def test_raw_input_is_normalized(self) -> None:
        assert transliterate("Cēna!", Dialect.CLASSICAL) == f"kˈe{LONG}na"

    def test_empty_text(self) -> None:
        assert transliterate("", Dialect.CLASSICAL) == ""
        assert transliterate("123 !!", Dialect.ECCLESIASTICAL) == ""

    def test_unknown_letters_pass_through(self) -> None:
        assert transliterate("ña", Dialect.CLASSICAL) == f"{STRESS}ña"

    def test_one_stress_mark_per_word(self) -> None:
        transcript = transliterate("Gallia est omnis divisa", Dialect.CLASSICAL)
        words = transcript.split(" ")

        assert len(words) == 4
        assert all(word.count(STRESS) == 1 for word in words)

    def test_unknown_dialect_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown dialect"):
            transliterate("cena", "gothic")


class TestRuleSets:
    """Test rule set lookup and tracing."""

    def test_get_ruleset(self) -> None:
        assert get_ruleset("classical") is CLASSICAL
        assert get_ruleset(" Ecclesiastical ") is ECCLESIASTICAL

    def test_trace_records_every_stage(self) -> None:
        steps = CLASSICAL.trace("cena")

        assert [name for name, _ in steps] == [
            "vowel_length",
            "diphthongs",
            "clusters",
            "consonants",
            "nasal_assimilation",
            "vowels",
            "stress",
        ]
        assert steps[-1][1] == CLASSICAL.apply("cena")

    def test_phonetic_examples(self) -> None:
        assert phonetic_examples("cena") == {
            "classical": "kˈena",
            "ecclesiastical": "tʃeˈna",
        }
