"""
Message Pattern Catalogue

Line formats recognised in free-text (WhatsApp style) exports, in priority
order, plus the quick checks used to spot the start of a new message and the
media/system noise patterns.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Pattern, Tuple


class ExtractionRule(Enum):
    """How a pattern's capture groups map onto a RawEntry."""

    # groups: date, time, sender, message
    SPLIT = 'split'
    # groups: "month day year time" blob, sender, message; time is the last token
    NAMED_MONTH = 'named_month'
    # groups: free-form date/time blob, sender, message; split on comma or first space
    DATETIME_BLOB = 'datetime_blob'
    # groups: sender, message
    UNDATED = 'undated'


class Tier(int, Enum):
    """Looseness of a pattern; lower tiers are safer message-start markers."""

    STRICT = 0
    LOOSE = 1
    UNDATED = 2


class ParsePattern(Enum):
    NAMED_MONTH_TAGGED = 'named_month_tagged'
    NAMED_MONTH_DASH = 'named_month_dash'
    NAMED_MONTH_COLON = 'named_month_colon'
    NAMED_MONTH_LOOSE = 'named_month_loose'
    BRACKET_DOTTED_MERIDIEM_COLON = 'bracket_dotted_meridiem_colon'
    BRACKET_DOTTED_MERIDIEM_DASH = 'bracket_dotted_meridiem_dash'
    BRACKET_SECONDS_COLON = 'bracket_seconds_colon'
    BRACKET_SECONDS_DASH = 'bracket_seconds_dash'
    BRACKET_MINUTES_COLON = 'bracket_minutes_colon'
    BRACKET_MINUTES_DASH = 'bracket_minutes_dash'
    BRACKET_LOOSE_COLON = 'bracket_loose_colon'
    BRACKET_LOOSE_DASH = 'bracket_loose_dash'
    PAREN_COLON = 'paren_colon'
    PAREN_DASH = 'paren_dash'
    ANDROID_COLON = 'android_colon'
    ANDROID_DASH = 'android_dash'
    SPACED_SEPARATOR_COLON = 'spaced_separator_colon'
    SPACED_SEPARATOR_DASH = 'spaced_separator_dash'
    SPACED_COLON = 'spaced_colon'
    SPACED_DASH = 'spaced_dash'
    CJK_BRACKET = 'cjk_bracket'
    LOOSE_DATETIME_COLON = 'loose_datetime_colon'
    LOOSE_DATETIME_DASH = 'loose_datetime_dash'
    SENDER_COLON = 'sender_colon'
    SENDER_DASH = 'sender_dash'


@dataclass(frozen=True)
class PatternSpec:
    kind: ParsePattern
    regex: Pattern
    rule: ExtractionRule
    tier: Tier

    def match(self, line: str):
        return self.regex.match(line)


MONTH_NAMES = (
    'january', 'february', 'march', 'april', 'may', 'june', 'july',
    'august', 'september', 'october', 'november', 'december',
)

_MONTH_ALT = '|'.join(MONTH_NAMES)

# "April 2nd 2025 1:20pm", "apr 2, 2025 1:20 PM"
_NAMED_MONTH_BLOB = (
    r'[a-zA-Z]+\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4},?\s+'
    r'\d{1,2}:\d{1,2}(?::\d{1,2})?\s*(?:[aApP]\.?\s?[mM]\.?)?'
)
_NUMERIC_DATE = r'\d{1,2}/\d{1,2}/\d{2,4}'
_SPACED_DATE = r'\d{1,4}[/\-.]\d{1,2}[/\-.]\d{1,4}'
_CLOCK = r'\d{1,2}:\d{2}(?::\d{2})?(?:\s*[aApP][mM])?'
_DOTTED_MERIDIEM = r'(?:[aApP]\.\s?[mM]\.)'

_COLON_TAIL = r'\s+([^:]+):\s+(.+)$'
_DASH_TAIL = r'\s+([^-]+)-(.+)$'


def _spec(kind: ParsePattern, pattern: str, rule: ExtractionRule, tier: Tier, flags: int = 0) -> PatternSpec:
    return PatternSpec(kind, re.compile(pattern, flags | re.DOTALL), rule, tier)


# Order is priority. The sampler may promote one pattern to the front per file,
# the rest are always tried in this order.
MESSAGE_PATTERNS: Tuple[PatternSpec, ...] = (
    # [April 2nd 2025 1:25pm]Kylie-👀: message
    _spec(ParsePattern.NAMED_MONTH_TAGGED,
          rf'^\[({_NAMED_MONTH_BLOB})\]\s*([^-:\[]+?-[^:\s]{{1,8}}):\s*(.+)$',
          ExtractionRule.NAMED_MONTH, Tier.STRICT),
    # [april 2nd 2025 1:20pm]Mom-message
    _spec(ParsePattern.NAMED_MONTH_DASH,
          rf'^\[({_NAMED_MONTH_BLOB})\]\s*([^-:]+?)-(?![^:\s]{{1,8}}:)(.+)$',
          ExtractionRule.NAMED_MONTH, Tier.STRICT),
    # [April 2nd 2025 1:20pm] Mom: message
    _spec(ParsePattern.NAMED_MONTH_COLON,
          rf'^\[({_NAMED_MONTH_BLOB})\]\s*([^:]+?):\s*(.+)$',
          ExtractionRule.NAMED_MONTH, Tier.STRICT),
    # [april, 2nd 2025 at 1:20pm]Mom-message
    _spec(ParsePattern.NAMED_MONTH_LOOSE,
          rf'^\[((?:{_MONTH_ALT})[^\]]*)\]\s*([^-]+?)-(?![^:\s]{{1,8}}:)(.+)$',
          ExtractionRule.NAMED_MONTH, Tier.STRICT, re.IGNORECASE),
    # [13/03/25, 11:38:24 p.m.] Sender: message
    _spec(ParsePattern.BRACKET_DOTTED_MERIDIEM_COLON,
          rf'^\[({_NUMERIC_DATE}),\s*(\d{{1,2}}:\d{{1,2}}(?::\d{{1,2}})?\s*{_DOTTED_MERIDIEM})\]{_COLON_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.BRACKET_DOTTED_MERIDIEM_DASH,
          rf'^\[({_NUMERIC_DATE}),\s*(\d{{1,2}}:\d{{1,2}}(?::\d{{1,2}})?\s*{_DOTTED_MERIDIEM})\]{_DASH_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    # [12/3/24, 21:24:47] Sender: message
    _spec(ParsePattern.BRACKET_SECONDS_COLON,
          rf'^\[({_NUMERIC_DATE}),\s*(\d{{1,2}}:\d{{1,2}}:\d{{1,2}}(?:\s*[aApP][mM])?)\]{_COLON_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.BRACKET_SECONDS_DASH,
          rf'^\[({_NUMERIC_DATE}),\s*(\d{{1,2}}:\d{{1,2}}:\d{{1,2}}(?:\s*[aApP][mM])?)\]{_DASH_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    # [12/3/24, 21:24] Sender: message
    _spec(ParsePattern.BRACKET_MINUTES_COLON,
          rf'^\[({_NUMERIC_DATE}),\s*(\d{{1,2}}:\d{{1,2}}(?:\s*[aApP][mM])?)\]{_COLON_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.BRACKET_MINUTES_DASH,
          rf'^\[({_NUMERIC_DATE}),\s*(\d{{1,2}}:\d{{1,2}}(?:\s*[aApP][mM])?)\]{_DASH_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    # [anything, anything] Sender: message
    _spec(ParsePattern.BRACKET_LOOSE_COLON,
          rf'^\[([^\]]+),\s*([^\]]+)\]{_COLON_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.BRACKET_LOOSE_DASH,
          rf'^\[([^\]]+),\s*([^\]]+)\]{_DASH_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    # (date, time) Sender: message
    _spec(ParsePattern.PAREN_COLON,
          rf'^\(([^,)]+),\s*([^)]+)\){_COLON_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.PAREN_DASH,
          rf'^\(([^,)]+),\s*([^)]+)\){_DASH_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    # 12/03/2024, 21:24 - Sender: message
    _spec(ParsePattern.ANDROID_COLON,
          r'^([^,]*\d[^,]*),\s*(\d[^-]*?)\s*-\s*([^:]+):\s+(.+)$',
          ExtractionRule.SPLIT, Tier.LOOSE),
    _spec(ParsePattern.ANDROID_DASH,
          r'^([^,]*\d[^,]*),\s*(\d[^-]*?)\s*-\s*([^-]+)-(.+)$',
          ExtractionRule.SPLIT, Tier.LOOSE),
    # 2024-03-12 21:24 - Sender: message
    _spec(ParsePattern.SPACED_SEPARATOR_COLON,
          rf'^({_SPACED_DATE})\s+({_CLOCK})\s*-\s*([^:]+):\s+(.+)$',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.SPACED_SEPARATOR_DASH,
          rf'^({_SPACED_DATE})\s+({_CLOCK})\s*-\s*([^-]+)-(.+)$',
          ExtractionRule.SPLIT, Tier.STRICT),
    # 2024-03-12 21:24 Sender: message
    _spec(ParsePattern.SPACED_COLON,
          rf'^({_SPACED_DATE})\s+({_CLOCK}){_COLON_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    _spec(ParsePattern.SPACED_DASH,
          rf'^({_SPACED_DATE})\s+({_CLOCK}){_DASH_TAIL}',
          ExtractionRule.SPLIT, Tier.STRICT),
    # [2024年3月12日 21:24] Sender: message
    _spec(ParsePattern.CJK_BRACKET,
          r'^\[(\d{4}年\d{1,2}月\d{1,2}日)\s*(\d{1,2}:\d{2}(?::\d{2})?)\]\s*([^:：]+)[:：]\s*(.+)$',
          ExtractionRule.SPLIT, Tier.STRICT),
    # <anything> - Sender: message
    _spec(ParsePattern.LOOSE_DATETIME_COLON,
          r'^(.*?)\s+-\s+([^:]+):\s+(.+)$',
          ExtractionRule.DATETIME_BLOB, Tier.LOOSE),
    _spec(ParsePattern.LOOSE_DATETIME_DASH,
          r'^(.*?)\s+-\s+([^-]+)-(.+)$',
          ExtractionRule.DATETIME_BLOB, Tier.LOOSE),
    # Sender: message
    _spec(ParsePattern.SENDER_COLON,
          r'^([^:]+):\s+(.+)$',
          ExtractionRule.UNDATED, Tier.UNDATED),
    _spec(ParsePattern.SENDER_DASH,
          r'^([^-]+)-(.+)$',
          ExtractionRule.UNDATED, Tier.UNDATED),
)

PATTERNS_BY_KIND = {spec.kind: spec for spec in MESSAGE_PATTERNS}

# Cheap "does this line open a message" checks, most common formats first
QUICK_CHECK_PATTERNS: List[Pattern] = [
    re.compile(r'^\[\d{1,2}/\d{1,2}/\d{2,4},\s*\d{1,2}:\d{1,2}(?::\d{1,2})?\s*(?:[aApP]\.?\s?[mM]\.?)?\]'),
    re.compile(
        rf'^\[(?:{_MONTH_ALT})\s+\d+(?:st|nd|rd|th)?,?\s+\d{{4}}\s+\d{{1,2}}:\d{{1,2}}(?::\d{{1,2}})?\s*(?:am|pm)?\]',
        re.IGNORECASE,
    ),
    re.compile(r'^\[\d{4}年\d{1,2}月\d{1,2}日'),
    re.compile(r'^\[[^\]]+\]\s+[^:]+:'),
    re.compile(r'^\[[^\]]+\]\s+[^-]+-'),
    re.compile(r'^\([^)]+\)\s+[^:]+:'),
    re.compile(r'^\([^)]+\)\s+[^-]+-'),
    re.compile(r'^\d{1,4}[/\-.]\d{1,2}[/\-.]\d{1,4}.*?:'),
    re.compile(r'^\d{1,4}[/\-.]\d{1,2}[/\-.]\d{1,4}.*?-'),
]

# Bracketed "[date, time]" prefix, used to re-split exports that lost their line breaks
BRACKETED_TIMESTAMP = re.compile(
    r'(?=\[\d{1,4}[/\-.]\d{1,2}[/\-.]\d{1,4},\s*\d{1,2}:\d{2})'
)

MEDIA_NOISE_PATTERNS: List[Pattern] = [
    re.compile(r'^<Media omitted>$', re.IGNORECASE),
    re.compile(r'^<媒体文件已省略>$'),
    re.compile(r'^<附件已省略>$'),
    re.compile(r'^<(?:Media weggelaten|Medien ausgeschlossen|Fichier multimédia exclu|'
               r'Archivo multimedia omitido|Mídia omitida)>$', re.IGNORECASE),
    re.compile(r'^(?:image|video|audio|document|sticker|GIF) omitted$', re.IGNORECASE),
]

SYSTEM_NOISE_PATTERNS: List[Pattern] = [
    re.compile(r'^(?:You created group|您创建了群组)', re.IGNORECASE),
    re.compile(r'^(?:You added|您添加了)', re.IGNORECASE),
    re.compile(r'^(?:You removed|您移除了)', re.IGNORECASE),
    re.compile(r'^(?:You changed the subject|您更改了主题)', re.IGNORECASE),
    re.compile(r"^(?:You changed this group's icon|您更改了此群组的图标)", re.IGNORECASE),
    re.compile(r'^(?:Messages and calls are end-to-end encrypted|消息和通话已获得端对端加密)', re.IGNORECASE),
    re.compile(r'^(?:Your messages are end-to-end encrypted|您的消息已获得端对端加密)', re.IGNORECASE),
    re.compile(r"^(?:.*joined using this group's invite link|.*使用此群组的邀请链接加入)", re.IGNORECASE),
    re.compile(r'^(?:.+ left|.*离开了)$', re.IGNORECASE),
    re.compile(r'^(?:.*changed their phone number|.*更改了他们的电话号码)', re.IGNORECASE),
    re.compile(r'^(?:This message was deleted|You deleted this message|此消息已删除)$', re.IGNORECASE),
    re.compile(r'^(?:Missed voice call|Missed video call|未接语音通话|未接视频通话)', re.IGNORECASE),
]
