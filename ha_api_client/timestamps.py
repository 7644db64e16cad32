"""
Timestamp codec for Home Assistant payloads.

Home Assistant reports times as ``yyyy-MM-ddTHH:mm:ss.ffffff+hh:mm``. The
codec accepts exactly one fractional-second width (6 by default, 3 for
older payloads) and always requires the UTC offset.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, PlainSerializer, ValidationInfo


DEFAULT_FRACTION_DIGITS = 6
SUPPORTED_FRACTION_DIGITS = (3, 6)

# Key under which a TimestampCodec is passed in pydantic's validation context
CODEC_CONTEXT_KEY = "timestamp_codec"


class TimestampParseError(ValueError):
    """Raised when text does not match the configured timestamp shape"""


class TimestampCodec:
    """Parse and format timestamps with a fixed fractional-second width"""

    def __init__(self, fraction_digits: int = DEFAULT_FRACTION_DIGITS):
        if fraction_digits not in SUPPORTED_FRACTION_DIGITS:
            raise ValueError(
                f"fraction_digits must be one of {SUPPORTED_FRACTION_DIGITS}, got {fraction_digits}"
            )
        self.fraction_digits = fraction_digits
        self._pattern = re.compile(
            r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})'
            r'\.(\d{%d})([+-])(\d{2}):(\d{2})$' % fraction_digits
        )

    def parse(self, text: str) -> datetime:
        """
        Parse text into an offset-aware datetime.

        Raises:
            TimestampParseError: If the text does not match the shape exactly
                or names an impossible date, time or offset
        """
        if not isinstance(text, str):
            raise TimestampParseError(f"Timestamp must be a string, got {type(text).__name__}")

        match = self._pattern.match(text)
        if not match:
            raise TimestampParseError(
                f"Timestamp '{text}' does not match "
                f"yyyy-MM-ddTHH:mm:ss.{'f' * self.fraction_digits}+hh:mm"
            )

        year, month, day, hour, minute, second, fraction, sign, off_h, off_m = match.groups()
        microsecond = int(fraction.ljust(6, '0'))
        try:
            offset = timedelta(hours=int(off_h), minutes=int(off_m))
            if sign == '-':
                offset = -offset
            return datetime(
                int(year), int(month), int(day),
                int(hour), int(minute), int(second), microsecond,
                tzinfo=timezone(offset),
            )
        except ValueError as e:
            raise TimestampParseError(f"Invalid timestamp '{text}': {e}") from e

    def format(self, value: datetime) -> str:
        """Format an offset-aware datetime in the configured shape"""
        if value.tzinfo is None or value.utcoffset() is None:
            raise TimestampParseError("Cannot format a naive datetime: a UTC offset is required")
        timespec = "microseconds" if self.fraction_digits == 6 else "milliseconds"
        return value.isoformat(timespec=timespec)


DEFAULT_CODEC = TimestampCodec()


def _codec_from(info: Optional[ValidationInfo]) -> TimestampCodec:
    context = info.context if info is not None else None
    if context and isinstance(context.get(CODEC_CONTEXT_KEY), TimestampCodec):
        return context[CODEC_CONTEXT_KEY]
    return DEFAULT_CODEC


def _parse_timestamp(value: Any, info: ValidationInfo) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise TimestampParseError("Naive datetime given: a UTC offset is required")
        return value
    return _codec_from(info).parse(value)


def _format_timestamp(value: datetime, info) -> str:
    context = getattr(info, "context", None)
    codec = DEFAULT_CODEC
    if context and isinstance(context.get(CODEC_CONTEXT_KEY), TimestampCodec):
        codec = context[CODEC_CONTEXT_KEY]
    return codec.format(value)


# datetime field type decoded/encoded through the codec
HATimestamp = Annotated[
    datetime,
    BeforeValidator(_parse_timestamp),
    PlainSerializer(_format_timestamp, return_type=str, when_used="json"),
]
