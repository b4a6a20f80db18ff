"""Configuration management for latinspeak.

Loads configuration from ~/.config/latinspeak/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .dialects import Dialect

CONFIG_DIR = Path.home() / ".config" / "latinspeak"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "latinspeak"
DEFAULT_HTTP_PORT = 8787

DEFAULT_CONFIG = """\
# latinspeak configuration

[tts]
# Speech-synthesis provider (see `latinspeak voices --help`)
provider = "elevenlabs"

# Send the IPA transcript as per-word SSML phoneme tags
phoneme_tags = false

# Per-dialect voice overrides (defaults are built in)
# [voices.classical]
# voice_id = "21m00Tcm4TlvDq8ikWAM"
# model_id = "eleven_multilingual_v2"
#
# [voices.ecclesiastical]
# voice_id = "AZnzlk1XvdvUeBnXmlld"

[storage]
# Where synthesized audio and its metadata are cached
cache_dir = "~/.cache/latinspeak"

# Public URL prefix for cached audio, e.g. a CDN in front of cache_dir/audio.
# Empty: URLs point at this server's /audio/ route when serving,
# file:// paths otherwise.
public_base_url = ""

[items]
# SQLite database of lesson items (defaults to <cache_dir>/items.db)
# database = "~/.cache/latinspeak/items.db"

[http]
# Bind address: "127.0.0.1" = localhost only, "0.0.0.0" = allow LAN access
host = "127.0.0.1"
port = 8787

# API keys are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - ElevenLabs provider
"""


@dataclass(frozen=True)
class VoiceOverride:
    """Per-dialect voice override; None keeps the built-in value."""

    voice_id: str | None = None
    model_id: str | None = None


@dataclass(frozen=True)
class TTSConfig:
    """Speech-synthesis configuration."""

    provider: str
    phoneme_tags: bool = False
    voices: dict[Dialect, VoiceOverride] = field(default_factory=dict)


@dataclass(frozen=True)
class StorageConfig:
    """Audio cache configuration."""

    cache_dir: Path
    public_base_url: str | None = None


@dataclass(frozen=True)
class ItemsConfig:
    """Lesson item store configuration."""

    database: Path


@dataclass(frozen=True)
class HTTPConfig:
    """HTTP API configuration."""

    host: str
    port: int


@dataclass(frozen=True)
class LatinspeakConfig:
    """Top-level latinspeak configuration."""

    tts: TTSConfig
    storage: StorageConfig
    items: ItemsConfig
    http: HTTPConfig


_cached_config: LatinspeakConfig | None = None


def generate_config() -> Path:
    """Generate default config file at ~/.config/latinspeak/config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(DEFAULT_CONFIG)
    return CONFIG_PATH


def reset_config_cache() -> None:
    """Forget the loaded configuration so the next load re-reads the file."""
    global _cached_config
    _cached_config = None


def _parse_voices(data: dict) -> dict[Dialect, VoiceOverride]:
    voices = {}
    for name, override in data.items():
        try:
            dialect = Dialect.parse(name)
        except ValueError:
            print(f"Ignoring voices.{name}: unknown dialect", file=sys.stderr)
            continue
        voices[dialect] = VoiceOverride(
            voice_id=override.get("voice_id") or None,
            model_id=override.get("model_id") or None,
        )
    return voices


def load_config() -> LatinspeakConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Returns:
        Loaded and validated LatinspeakConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if not CONFIG_PATH.exists():
        path = generate_config()
        print(
            f"No config found. Generated {path}. Review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    try:
        with open(CONFIG_PATH, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Invalid config file {CONFIG_PATH}: {e}", file=sys.stderr)
        raise SystemExit(1) from None

    tts = data.get("tts", {})
    storage = data.get("storage", {})
    items = data.get("items", {})
    http_cfg = data.get("http", {})

    # Validate required fields
    missing = []
    if "provider" not in tts:
        missing.append("tts.provider")
    if "host" not in http_cfg:
        missing.append("http.host")

    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(f"Edit {CONFIG_PATH} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    # Env vars override config file values
    cache_dir = Path(
        os.getenv("LATINSPEAK_CACHE_DIR", str(storage.get("cache_dir", DEFAULT_CACHE_DIR)))
    ).expanduser()
    database = os.getenv("LATINSPEAK_ITEMS_DB", items.get("database", ""))
    port_str = os.getenv("LATINSPEAK_HTTP_PORT", str(http_cfg.get("port", "")))

    try:
        port = int(port_str) if port_str else DEFAULT_HTTP_PORT
    except ValueError:
        print(f"Invalid HTTP port: {port_str!r}", file=sys.stderr)
        raise SystemExit(1) from None

    _cached_config = LatinspeakConfig(
        tts=TTSConfig(
            provider=os.getenv("LATINSPEAK_PROVIDER", tts["provider"]),
            phoneme_tags=bool(tts.get("phoneme_tags", False)),
            voices=_parse_voices(data.get("voices", {})),
        ),
        storage=StorageConfig(
            cache_dir=cache_dir,
            public_base_url=os.getenv(
                "LATINSPEAK_PUBLIC_BASE_URL", storage.get("public_base_url", "")
            )
            or None,
        ),
        items=ItemsConfig(
            database=(
                Path(database).expanduser() if database else cache_dir / "items.db"
            ),
        ),
        http=HTTPConfig(
            host=os.getenv("LATINSPEAK_HTTP_HOST", http_cfg["host"]),
            port=port,
        ),
    )

    return _cached_config
