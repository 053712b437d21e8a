"""
Main Chat Analyzer

`analyze_chat_data` assembles every analysis module into one AnalysisData;
`ChatRecapAnalyzer` wraps ingestion and analysis behind a single object.
"""

import json
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Union

import pandas as pd

from .analysis_models import AnalysisData, Overview, TextAnalysis
from .analysis_overview import compute_overview, date_range, span_days
from .config import DEFAULT_CONFIG, EngineConfig
from .data_wrangling import build_dataframe
from .models import NormalizedMessage, Platform, ProcessResult
from .nlp_analysis import compute_sentiment_score
from .pipeline import ProgressCallback, process
from .text_analysis import compute_text_analysis
from .time_analysis import compute_time_analysis, empty_time_analysis

LOGGER = logging.getLogger(__name__)

NO_MESSAGES_SUMMARY = 'No messages to analyze'
NO_DATES_SUMMARY = 'No dated messages'


def timespan_summary(start: Optional[datetime], end: Optional[datetime], duration: int) -> str:
    if start is None or end is None:
        return NO_DATES_SUMMARY
    unit = 'day' if duration == 1 else 'days'
    return f"{start:%B %d, %Y} to {end:%B %d, %Y} ({duration} {unit})"


def analyze_chat_data(
    messages: Sequence[NormalizedMessage],
    config: Optional[EngineConfig] = None
) -> AnalysisData:
    """
    Run every analysis over one message stream.

    The synthetic placeholder emitted for unreadable input is ignored, so a
    failed ingestion analyzes as an empty chat.

    Args:
        messages: Normalized messages, typically ProcessResult.messages
        config: Engine settings

    Returns:
        AnalysisData with sentiment folded into the text section and reply
        latency folded into the overview

    Raises:
        InsufficientParticipantsError: If the messages come from fewer than two senders
    """
    config = config or DEFAULT_CONFIG
    messages = [m for m in messages if not m.synthetic]

    if not messages:
        return AnalysisData(
            start_date=None,
            end_date=None,
            duration=0,
            timespan_summary=NO_MESSAGES_SUMMARY,
            overview=Overview(),
            text_analysis=TextAnalysis(),
            time_analysis=empty_time_analysis(),
        )

    start, end = date_range(messages)
    duration = span_days(start, end)

    overview = compute_overview(messages, config)
    text_analysis = replace(
        compute_text_analysis(messages, config),
        sentiment_score=compute_sentiment_score(messages),
    )
    time_analysis = compute_time_analysis(messages, config)

    LOGGER.info("Analyzed %d messages spanning %d days", len(messages), duration)
    return AnalysisData(
        start_date=start,
        end_date=end,
        duration=duration,
        timespan_summary=timespan_summary(start, end, duration),
        overview=overview,
        text_analysis=text_analysis,
        time_analysis=time_analysis,
    )


class ChatRecapAnalyzer:
    """
    Main analyzer class for chat exports.

    Provides a unified interface for ingesting an export from any supported
    platform, analyzing it and exporting the results.
    """

    def __init__(
        self,
        data: Any,
        platform: Union[str, Platform] = Platform.AUTO,
        config: Optional[EngineConfig] = None,
        progress: Optional[ProgressCallback] = None
    ):
        """
        Initialize the analyzer.

        Args:
            data: Export text, bytes, or parsed JSON
            platform: Platform hint, or 'auto'
            config: Engine settings
            progress: Optional (stage, fraction) callback for ingestion
        """
        self.data = data
        self.platform = platform
        self.config = config or DEFAULT_CONFIG
        self.progress = progress
        self.result: Optional[ProcessResult] = None
        self.analysis: Optional[AnalysisData] = None

    @classmethod
    def from_file(
        cls,
        file_path: str,
        platform: Union[str, Platform] = Platform.AUTO,
        config: Optional[EngineConfig] = None
    ) -> 'ChatRecapAnalyzer':
        """Read an export file as bytes and wrap it."""
        with open(file_path, 'rb') as f:
            return cls(f.read(), platform=platform, config=config)

    def process(self, now: Optional[datetime] = None) -> ProcessResult:
        """
        Ingest the export.

        Args:
            now: Request clock for fallback timestamps

        Returns:
            ProcessResult
        """
        self.result = process(
            self.data,
            platform=self.platform,
            config=self.config,
            progress=self.progress,
            now=now,
        )
        return self.result

    def analyze(self) -> AnalysisData:
        """
        Run the full analysis, ingesting first when needed.

        Returns:
            AnalysisData
        """
        if self.result is None:
            self.process()

        self.analysis = analyze_chat_data(self.result.messages, self.config)
        return self.analysis

    def get_dataframe(self) -> pd.DataFrame:
        """
        Get the ingested messages as a feature-enriched DataFrame.

        Returns:
            DataFrame copy, one row per message
        """
        if self.result is None:
            raise ValueError("Must call process() first")
        return build_dataframe(self.result.messages).copy()

    def to_dict(self) -> Dict[str, Any]:
        if self.analysis is None:
            raise ValueError("Must call analyze() first")
        return {
            'platform': self.result.platform.value if self.result.platform else None,
            'warnings': [w.value for w in self.result.warnings],
            'stats': self.result.to_dict()['stats'],
            'analysis': self.analysis.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def export_results(
        self,
        output_path: str,
        format: str = 'json'
    ) -> None:
        """
        Export analysis results to file.

        Args:
            output_path: Path to output file
            format: Export format ('json' or 'csv')
        """
        if format == 'json':
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self.to_json())
        elif format == 'csv':
            self.get_dataframe().to_csv(output_path, index=False)
        else:
            raise ValueError(f"Unknown format: {format}. Use 'json' or 'csv'")
