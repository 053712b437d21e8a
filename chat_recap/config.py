"""
Engine Configuration

Tunable knobs for ingestion and analysis. Defaults reproduce the stock
behaviour; callers may override them directly or through CHAT_RECAP_*
environment variables (optionally loaded from a .env file).
"""

import os
from dataclasses import dataclass, fields
from typing import Dict, Optional

from dotenv import load_dotenv

ENV_PREFIX = 'CHAT_RECAP_'


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by the ingestion pipeline and the analysis functions."""

    # Tie-break for numeric dates where both leading components are <= 12
    dayfirst: bool = True
    # Try a lenient month-first parse of "{date}, {time}" before the component parser
    generic_parse: bool = True
    # Lines sampled to elect the primary extraction pattern
    sample_lines: int = 10
    dedup_window_seconds: int = 60
    dedup_similarity: float = 0.8
    # Gaps at or above this are not counted as replies
    response_cutoff_seconds: int = 3600
    # Gap that closes a conversation session
    session_gap_seconds: int = 3600
    top_words: int = 50
    top_sender_words: int = 10
    top_emojis: int = 10
    filter_noise: bool = False
    exclude_stopwords: bool = False


DEFAULT_CONFIG = EngineConfig()


def _coerce(raw: str, default):
    """Convert an environment string to the type of the field default."""
    if isinstance(default, bool):
        value = raw.strip().lower()
        if value in ('1', 'true', 'yes', 'on'):
            return True
        if value in ('0', 'false', 'no', 'off'):
            return False
        raise ValueError(f"Expected a boolean, got {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def load_config(
    env_file: Optional[str] = None,
    overrides: Optional[Dict[str, object]] = None
) -> EngineConfig:
    """
    Build an EngineConfig from the environment.

    Args:
        env_file: Optional path to a .env file; the default dotenv lookup is used otherwise
        overrides: Explicit values that win over the environment

    Returns:
        EngineConfig instance

    Raises:
        ValueError: If a variable cannot be converted or an override names an unknown field
    """
    load_dotenv(dotenv_path=env_file)

    values = {}
    for field in fields(EngineConfig):
        raw = os.getenv(f"{ENV_PREFIX}{field.name.upper()}")
        if raw is None:
            continue
        try:
            values[field.name] = _coerce(raw, field.default)
        except ValueError as exc:
            raise ValueError(
                f"Invalid value for {ENV_PREFIX}{field.name.upper()}: {exc}"
            ) from exc

    if overrides:
        known = {field.name for field in fields(EngineConfig)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown config fields: {sorted(unknown)}")
        values.update(overrides)

    return EngineConfig(**values)
