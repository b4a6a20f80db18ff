"""latinspeak - Latin pronunciation transcripts and cached speech synthesis."""

__version__ = "0.1.0"
__all__ = ["SynthesisOrchestrator", "transliterate"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "SynthesisOrchestrator":
        from .tts.pipeline import SynthesisOrchestrator

        return SynthesisOrchestrator
    if name == "transliterate":
        from .phonetics import transliterate

        return transliterate
    raise AttributeError(f"module 'latinspeak' has no attribute {name!r}")
