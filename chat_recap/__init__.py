"""
Chat Recap Package

Ingests chat exports from WhatsApp (plain text) and Instagram, Discord,
Telegram and Snapchat (JSON) into one normalized, deduplicated, sorted
message stream, and computes overview, text, time, response and sentiment
statistics over it.
"""

__version__ = "1.0.0"

from .analysis_models import AnalysisData
from .chat_analyzer import ChatRecapAnalyzer, analyze_chat_data
from .config import DEFAULT_CONFIG, EngineConfig, load_config
from .models import (
    ChatRecapError,
    DateParseError,
    InsufficientParticipantsError,
    NormalizedMessage,
    Platform,
    ProcessResult,
    Stats,
    WarningCode,
)
from .pipeline import process
from .analysis_overview import compute_overview
from .text_analysis import compute_text_analysis
from .time_analysis import compute_time_analysis
from .response_analysis import compute_response_time
from .nlp_analysis import compute_sentiment_score

__all__ = [
    "ChatRecapAnalyzer",
    "analyze_chat_data",
    "process",
    "AnalysisData",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "ChatRecapError",
    "DateParseError",
    "InsufficientParticipantsError",
    "NormalizedMessage",
    "Platform",
    "ProcessResult",
    "Stats",
    "WarningCode",
    "compute_overview",
    "compute_text_analysis",
    "compute_time_analysis",
    "compute_response_time",
    "compute_sentiment_score",
]
