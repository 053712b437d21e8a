"""
WhatsApp Adapter

Free-text exports: clean, split, merge continuation lines, extract entries,
optionally drop media/system noise, then resolve every date.
"""

import json
import logging
from typing import Any, List, Tuple

from ..data_cleaning import filter_noise, preprocess_text, split_to_lines
from ..data_extraction import extract_entries, merge_multiline_messages
from ..date_parsing import DateTimeNormalizer
from ..models import AdapterCounters, NormalizedMessage, Platform, RawEntry, WarningCode
from .base import AdapterError, PlatformAdapter, is_metadata_record

LOGGER = logging.getLogger(__name__)


class WhatsAppAdapter(PlatformAdapter):
    platform = Platform.WHATSAPP

    def parse(self, data: Any) -> Tuple[List[NormalizedMessage], AdapterCounters]:
        text = self._as_text(data)
        counters = AdapterCounters()

        self.report('preprocess', 0.0)
        lines = split_to_lines(preprocess_text(text))

        self.report('merge', 0.0)
        merged = merge_multiline_messages(lines, self.config.sample_lines)

        self.report('extract', 0.0)
        report = extract_entries(merged, self.config.sample_lines, progress=self.progress)
        entries = report.entries

        if self.config.filter_noise:
            entries, counters.system, counters.media = filter_noise(entries)

        self.report('normalize', 0.0)
        messages = self.normalize_entries(entries)
        return messages, counters

    def normalize_entries(self, entries: List[RawEntry]) -> List[NormalizedMessage]:
        normalizer = DateTimeNormalizer(
            now=self.now,
            dayfirst=self.config.dayfirst,
            generic_parse=self.config.generic_parse,
        )

        messages = []
        for entry in entries:
            if entry.is_dated:
                date, resolved = normalizer.normalize(entry.date_part, entry.time_part)
                timestamp = f"{entry.date_part}, {entry.time_part}"
            else:
                date, resolved = self.now, False
                timestamp = self.now.isoformat()
            messages.append(NormalizedMessage(
                timestamp=timestamp,
                sender=entry.sender or 'Unknown',
                message=entry.message,
                date=date,
                date_resolved=resolved,
            ))

        resolved_count = sum(1 for m in messages if m.date_resolved)
        LOGGER.debug("Resolved %d of %d dates", resolved_count, len(messages))
        return messages

    @staticmethod
    def _as_text(data: Any) -> str:
        if data is None:
            return ''
        if isinstance(data, bytes):
            return data.decode('utf-8', errors='replace')
        if isinstance(data, str):
            stripped = data.strip()
            # An upload-metadata JSON document handed over instead of the chat text
            if stripped.startswith('{') and stripped.endswith('}'):
                try:
                    parsed = json.loads(stripped)
                except json.JSONDecodeError:
                    return data
                if is_metadata_record(parsed):
                    raise AdapterError(WarningCode.METADATA_FILE_NOT_DATA_FILE)
            return data
        if is_metadata_record(data):
            raise AdapterError(WarningCode.METADATA_FILE_NOT_DATA_FILE)
        raise AdapterError(
            WarningCode.UNSUPPORTED_INPUT_TYPE,
            f"WhatsApp exports are text, got {type(data).__name__}"
        )
