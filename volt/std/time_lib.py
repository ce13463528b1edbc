"""Clock, sleep and calendar natives.

Timestamps are milliseconds since the Unix epoch. Calendar conversion
happens in UTC so that ``formatDate(parseDate(d), "%Y-%m-%d") == d``
holds on every host.
"""

import time
from datetime import datetime, timezone
from typing import Any, List

from volt.errors import VoltError
from volt.types import is_number


def populate_time(interpreter) -> None:
    def std_now(args: List[Any]) -> Any:
        return float(time.time_ns() // 1_000_000)

    def std_sleep(args: List[Any]) -> Any:
        ms = args[0]
        if not is_number(ms) or ms < 0:
            raise VoltError('TypeError', 'sleep() requires a non-negative number of milliseconds')
        try:
            time.sleep(ms / 1000.0)
        except (OverflowError, ValueError):
            # non-finite or past what the host clock can represent
            raise VoltError('ValueError', 'sleep() duration out of range')
        return None

    def std_format_date(args: List[Any]) -> Any:
        ms, fmt = args
        if not is_number(ms):
            raise VoltError('TypeError', 'formatDate() timestamp must be a number')
        if not isinstance(fmt, str):
            raise VoltError('TypeError', 'formatDate() format must be a string')
        try:
            moment = datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise VoltError('ValueError', 'formatDate() timestamp out of range')
        return moment.strftime(fmt)

    def std_parse_date(args: List[Any]) -> Any:
        text = args[0]
        if not isinstance(text, str):
            raise VoltError('TypeError', 'parseDate() requires a string')
        try:
            moment = datetime.strptime(text, '%Y-%m-%d').replace(tzinfo=timezone.utc)
        except ValueError:
            raise VoltError('ValueError', f"parseDate() expects YYYY-MM-DD, got '{text}'")
        return moment.timestamp() * 1000.0

    interpreter.define('now', 0, std_now)
    interpreter.define('sleep', 1, std_sleep)
    interpreter.define('formatDate', 2, std_format_date)
    interpreter.define('parseDate', 1, std_parse_date)
