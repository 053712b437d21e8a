"""
Platform Adapter Base

Shared plumbing for the per-platform adapters: JSON coercion, timestamp
parsing, placeholder results, and the postprocessing every adapter runs
before handing back a ProcessResult.
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Tuple

import pandas as pd

from ..config import DEFAULT_CONFIG, EngineConfig
from ..models import (
    AdapterCounters,
    ChatRecapError,
    NormalizedMessage,
    Platform,
    ProcessResult,
    Stats,
    WarningCode,
)
from ..postprocessing import remove_duplicates, sort_messages, validate_messages

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

SYSTEM_SENDER = 'System'

# Keys whose presence without any message data marks an upload-metadata record
METADATA_KEYS = ('id', 'originalName', 'path')

# Epoch values above this are milliseconds
EPOCH_MS_THRESHOLD = 1e11

MOJIBAKE_MARKERS = 'ÃÂ¢ð£¨'


class AdapterError(ChatRecapError):
    """Input rejected by an adapter; becomes a placeholder result, never escapes."""

    def __init__(self, code: WarningCode, detail: Optional[str] = None):
        super().__init__(detail or code.value)
        self.code = code
        self.detail = detail


def load_json(data: Any) -> Any:
    """
    Return parsed JSON for str/bytes input; other values pass through.

    Raises:
        AdapterError: invalid_json_format when the text is not valid JSON
    """
    if isinstance(data, bytes):
        data = data.decode('utf-8', errors='replace')
    if isinstance(data, str):
        text = data.strip().lstrip('\ufeff')
        if not text:
            raise AdapterError(WarningCode.EMPTY_OR_INVALID_DATA, 'Empty input')
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise AdapterError(WarningCode.INVALID_JSON_FORMAT, str(exc)) from exc
    return data


def is_metadata_record(data: Any, data_keys: Iterable[str] = ('messages',)) -> bool:
    """True for an upload-metadata dict (id/originalName/path) carrying no message data."""
    if not isinstance(data, dict):
        return False
    if not all(key in data for key in METADATA_KEYS):
        return False
    return not any(key in data for key in data_keys)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an epoch number or date string into a naive UTC datetime.

    Epoch values are read as milliseconds when large enough, seconds
    otherwise. Returns None when nothing sensible can be read.
    """
    if value is None or isinstance(value, bool) or value == '':
        return None

    if isinstance(value, str) and value.strip().lstrip('-').replace('.', '', 1).isdigit():
        value = float(value)

    try:
        if isinstance(value, (int, float)):
            unit = 'ms' if abs(value) > EPOCH_MS_THRESHOLD else 's'
            parsed = pd.to_datetime(value, unit=unit, utc=True, errors='coerce')
        elif isinstance(value, str):
            parsed = pd.to_datetime(value.strip(), utc=True, errors='coerce')
        else:
            return None
    except (ValueError, OverflowError) as exc:
        LOGGER.debug("Unparseable timestamp %r: %s", value, exc)
        return None

    if pd.isna(parsed):
        return None
    return parsed.tz_convert(None).to_pydatetime()


def fix_mojibake(text: str) -> str:
    """Undo UTF-8 text that was decoded as Latin-1 (common in Instagram exports)."""
    if not text or not any(ch in text for ch in MOJIBAKE_MARKERS):
        return text
    try:
        return text.encode('latin-1').decode('utf-8')
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text


def placeholder_result(
    code: WarningCode,
    detail: Optional[str] = None,
    now: Optional[datetime] = None,
    platform: Optional[Platform] = None,
    extra_warnings: Iterable[WarningCode] = ()
) -> ProcessResult:
    """
    Result for input that produced no messages.

    Carries one synthetic "System" message whose text is the diagnostic, so
    consumers never see an empty message list.
    """
    now = now or datetime.now()
    text = detail or code.value
    message = NormalizedMessage(
        timestamp=now.isoformat(),
        sender=SYSTEM_SENDER,
        message=text,
        date=now,
        date_resolved=False,
        synthetic=True,
    )
    warnings = [code]
    warnings.extend(w for w in extra_warnings if w not in warnings)
    return ProcessResult(
        messages=(message,),
        warnings=tuple(warnings),
        stats=Stats(),
        diagnostics=(detail,) if detail else (),
        platform=platform,
    )


class PlatformAdapter:
    """
    Maps one platform's export into a ProcessResult.

    Subclasses implement `parse`, which returns the mapped messages and
    raises AdapterError for inputs of the wrong shape. `process` never
    raises.
    """

    platform: Platform = None

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        now: Optional[datetime] = None,
        progress: Optional[ProgressCallback] = None
    ):
        self.config = config or DEFAULT_CONFIG
        self.now = now or datetime.now()
        self.progress = progress

    def parse(self, data: Any) -> Tuple[List[NormalizedMessage], AdapterCounters]:
        raise NotImplementedError

    def report(self, stage: str, fraction: float) -> None:
        if self.progress is not None:
            self.progress(stage, fraction)

    def process(self, data: Any) -> ProcessResult:
        """
        Run the adapter end to end.

        Args:
            data: Raw text, bytes or parsed JSON

        Returns:
            ProcessResult; malformed input yields a placeholder with a warning code
        """
        try:
            messages, counters = self.parse(data)
        except AdapterError as exc:
            LOGGER.warning("%s input rejected: %s", self.platform.value, exc)
            return placeholder_result(exc.code, exc.detail, self.now, self.platform)
        except Exception as exc:
            LOGGER.exception("%s adapter failed", self.platform.value)
            return placeholder_result(
                WarningCode.PROCESSING_FAILED, f"{type(exc).__name__}: {exc}", self.now, self.platform
            )

        return self.finalize(messages, counters)

    def message(
        self,
        timestamp: str,
        sender: str,
        text: str,
        date: Optional[datetime]
    ) -> NormalizedMessage:
        """Build a message, substituting the request clock for a missing date."""
        if date is None:
            return NormalizedMessage(timestamp, sender, text, self.now, date_resolved=False)
        return NormalizedMessage(timestamp, sender, text, date)

    def finalize(self, messages: List[NormalizedMessage], counters: AdapterCounters) -> ProcessResult:
        """Sort, deduplicate, count and validate mapped messages."""
        if not messages:
            return placeholder_result(
                WarningCode.NO_MESSAGES, None, self.now, self.platform,
                extra_warnings=self._participant_warning(counters.participants),
            )

        self.report('postprocess', 0.0)
        ordered = sort_messages(messages)
        unique = remove_duplicates(
            ordered,
            window_seconds=self.config.dedup_window_seconds,
            threshold=self.config.dedup_similarity,
        )

        stats = Stats(
            total_messages=len(unique),
            valid_date_messages=sum(1 for m in unique if m.has_resolved_date),
            filtered_system_messages=counters.system,
            filtered_media_messages=counters.media,
        )
        warnings = validate_messages(unique, counters.participants)

        LOGGER.info(
            "%s: %d messages (%d dated, %d duplicates dropped)",
            self.platform.value, stats.total_messages, stats.valid_date_messages,
            len(ordered) - len(unique)
        )
        return ProcessResult(
            messages=tuple(unique),
            warnings=tuple(warnings),
            stats=stats,
            platform=self.platform,
        )

    @staticmethod
    def _participant_warning(participants) -> List[WarningCode]:
        known = {p for p in participants if p}
        if known and len(known) < 2:
            return [WarningCode.SINGLE_PARTICIPANT]
        return []
