"""
Ingestion Pipeline

Single entry point turning a raw export into a ProcessResult. The caller
supplies text, bytes or an already parsed JSON value plus a platform hint;
"auto" tries every adapter in a fixed order and keeps the first one that
yields a real message.
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .models import Platform, ProcessResult, WarningCode
from .platforms import ADAPTERS, placeholder_result
from .platforms.base import is_metadata_record

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

AUTO_ORDER = (
    Platform.WHATSAPP,
    Platform.INSTAGRAM,
    Platform.DISCORD,
    Platform.TELEGRAM,
    Platform.SNAPCHAT,
)


def _decode(data: Any) -> Any:
    if data is None:
        return ''
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode('utf-8', errors='replace')
    return data


def _parse_json_text(text: str) -> Optional[Any]:
    """Parsed value when `text` is a JSON object or array, otherwise None."""
    stripped = text.strip().lstrip('\ufeff')
    if not stripped or stripped[0] not in '{[':
        return None
    try:
        value = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, (dict, list)) else None


def _resolve_platform(platform: Union[str, Platform]) -> Optional[Platform]:
    if isinstance(platform, Platform):
        return platform
    try:
        return Platform(str(platform).strip().lower())
    except ValueError:
        return None


def _auto_detect(data: Any, config: EngineConfig, now: datetime, progress) -> ProcessResult:
    parsed = _parse_json_text(data) if isinstance(data, str) else data
    is_text = isinstance(data, str) and parsed is None
    if is_metadata_record(parsed):
        return placeholder_result(WarningCode.METADATA_FILE_NOT_DATA_FILE, None, now)

    for platform in AUTO_ORDER:
        if platform is Platform.WHATSAPP and not is_text:
            continue
        if platform is not Platform.WHATSAPP and is_text:
            # Plain text that is not JSON can only be a WhatsApp export
            continue

        adapter = ADAPTERS[platform](config=config, now=now, progress=progress)
        result = adapter.process(data if platform is Platform.WHATSAPP else parsed)
        if result.has_real_messages:
            LOGGER.info("Auto-detected platform: %s", platform.value)
            return ProcessResult(
                messages=result.messages,
                warnings=result.warnings + (WarningCode.auto_detected(platform),),
                stats=result.stats,
                diagnostics=result.diagnostics,
                platform=platform,
            )
        LOGGER.debug("Auto-detect: %s produced no messages (%s)", platform.value,
                     ', '.join(w.value for w in result.warnings))

    return placeholder_result(
        WarningCode.NO_MESSAGES,
        None,
        now,
        extra_warnings=(WarningCode.PLATFORM_NOT_DETECTED,),
    )


def process(
    data: Any,
    platform: Union[str, Platform] = Platform.AUTO,
    config: Optional[EngineConfig] = None,
    progress: Optional[ProgressCallback] = None,
    now: Optional[datetime] = None
) -> ProcessResult:
    """
    Ingest one chat export.

    Args:
        data: Export text, UTF-8 bytes, or a parsed JSON value
        platform: whatsapp, instagram, discord, telegram, snapchat or auto
        config: Engine settings; defaults apply when omitted
        progress: Optional callback receiving (stage, fraction) at each stage
        now: Request clock used for every fallback timestamp; defaults to the current time

    Returns:
        ProcessResult with at least one message. Never raises.
    """
    config = config or DEFAULT_CONFIG
    now = now or datetime.now()

    resolved = _resolve_platform(platform)
    if resolved is None:
        LOGGER.warning("Unsupported platform hint: %r", platform)
        return placeholder_result(WarningCode.UNSUPPORTED_PLATFORM, str(platform), now)

    try:
        data = _decode(data)
        if resolved is Platform.AUTO:
            result = _auto_detect(data, config, now, progress)
        else:
            adapter = ADAPTERS[resolved](config=config, now=now, progress=progress)
            result = adapter.process(data)
    except Exception as exc:
        LOGGER.exception("Processing failed for platform %s", resolved.value)
        return placeholder_result(WarningCode.PROCESSING_FAILED, f"{type(exc).__name__}: {exc}", now)

    if progress is not None:
        progress('done', 1.0)
    return result
