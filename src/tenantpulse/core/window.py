"""Dashboard window token parsing.

Dashboards chart one sample per minute, so a window token only decides how
many minutes of samples to show.
"""

import re

DEFAULT_SAMPLES = 10
MIN_SAMPLES = 1
MAX_SAMPLES = 60

_WINDOW_PATTERN = re.compile(r"(\d+)([smh])", re.IGNORECASE | re.ASCII)


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def parse_window(
    token: str | None,
    default: int = DEFAULT_SAMPLES,
    maximum: int = MAX_SAMPLES,
) -> int:
    """Parse a window token such as ``"10m"`` or ``"600s"`` into a sample count.

    Args:
        token: Window token, ``<digits><s|m|h>`` (case-insensitive).
        default: Sample count for a missing or malformed token.
        maximum: Upper clamp for the sample count.

    Returns:
        Number of one-minute samples, clamped to ``[1, maximum]``.
        Never raises; bad input yields ``default``.
    """
    if not token:
        return default
    match = _WINDOW_PATTERN.fullmatch(str(token))
    if match is None:
        return default
    digits = match.group(1).lstrip("0") or "0"
    # Anything this long is far past the clamp; also keeps int() cheap
    if len(digits) > 9:
        return maximum
    amount = int(digits)
    unit = match.group(2).lower()
    if unit == "h":
        minutes = amount * 60
    elif unit == "m":
        minutes = amount
    else:
        minutes = _round_half_up(amount, 60)
    return max(MIN_SAMPLES, min(maximum, minutes))
