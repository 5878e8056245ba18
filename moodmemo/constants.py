"""Configuration constants and templates for the application."""

from __future__ import annotations

import logging
import os
from datetime import tzinfo
from pathlib import Path
from textwrap import dedent
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from jinja2 import DictLoader, Environment, select_autoescape

# Basic logging setup
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)


def resolve_database_path() -> Path:
    """Pick the SQLite file, honouring the MOODMEMO_DB override."""
    env = os.environ.get("MOODMEMO_DB")
    if env:
        return Path(env).expanduser().resolve()
    return Path("moodmemo.sqlite3")


def resolve_local_timezone() -> tzinfo | None:
    """Return the one calendar zone every day grouping is computed in.

    MOODMEMO_TZ names an IANA zone. Without it the result is None, which
    means the system zone looked up per moment, so each date gets the
    offset (standard or daylight) in force on that date.
    """
    name = os.environ.get("MOODMEMO_TZ")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logging.warning("Unknown MOODMEMO_TZ %r; using the local zone.", name)
    return None


# Database and file paths
COMMENT_CHARACTER_LIMIT = 100
DATABASE_PATH = resolve_database_path()
LEGACY_JSON_PATH = Path("moodmemo.json")
LOCAL_TIMEZONE = resolve_local_timezone()

# Mood palette, best to worst, with its fixed 1-6 score
MOOD_CHOICES = [
    ("😄", 6),
    ("😊", 5),
    ("😐", 4),
    ("😟", 3),
    ("😭", 2),
    ("😠", 1),
]

# Rolling analysis window and its thresholds
ANALYSIS_WINDOW = 5
VERY_GOOD_THRESHOLD = 5.0
MIXED_THRESHOLD = 3.5

# Calendar gradient: hue of the low-mood end and of the high-mood end (HSV, 0-1)
LOW_MOOD_HUE = 0.0
HIGH_MOOD_HUE = 1 / 3
CALENDAR_SATURATION = 0.55
CALENDAR_VALUE = 0.95

ANALYSIS_MESSAGES = {
    "very_good": "最近とても調子が良いですね！ You've been feeling great lately!",
    "mixed": "良い日もあれば、そうでない日もありますね。 Some ups and downs recently.",
    "low": "少し疲れているかも。無理しないでね。 Things seem tough lately; go easy on yourself.",
    "not_enough": "分析するには記録が足りません。 Not enough data to analyze yet.",
    "empty": "まだ記録がありません。 No moods recorded yet.",
}

WEEKDAY_HEADERS = ["日", "月", "火", "水", "木", "金", "土"]

# Jinja2 template environment for HTML rendering
TEMPLATE_ENV = Environment(
    loader=DictLoader(
        {
            "day_detail.html": dedent(
                """\
                <div style='font-family:"Segoe UI",sans-serif; line-height:1.6; color:#2d3436;'>
                    <div style='font-size:16px; font-weight:bold; margin-bottom:4px;'>{{ day_display }}</div>
                    {% if average is not none %}
                    <div style='color:#636e72; margin-bottom:8px;'>平均 Average: <strong>{{ '%.1f' | format(average) }}</strong> / 6</div>
                    {% endif %}
                    <hr style='border:0; height:1px; background:#dfe6e9; margin:8px 0;'>
                    {% for entry in entries %}
                    <div style='margin:6px 0;'>
                        <span style='font-size:22px;'>{{ entry.symbol }}</span>
                        <span style='color:#636e72;'>{{ entry.time_display }}</span>
                        {% if entry.comment %}
                        <div style='white-space:pre-wrap; margin-left:32px;'>{{ entry.comment | e }}</div>
                        {% endif %}
                    </div>
                    {% endfor %}
                </div>
                """
            ),
            "empty_day.html": dedent(
                """\
                <div style='font-family:"Segoe UI",sans-serif; color:#636e72;'>
                    <div style='font-weight:bold;'>{{ day_display }}</div>
                    この日の記録はありません。 No records for this day.
                </div>
                """
            ),
        }
    ),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

DAY_DETAIL_TEMPLATE = TEMPLATE_ENV.get_template("day_detail.html")
EMPTY_DAY_TEMPLATE = TEMPLATE_ENV.get_template("empty_day.html")
