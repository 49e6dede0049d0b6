"""Registration number extraction.

Registration numbers are 8-9 digit runs. OCR regularly reads a leading or
embedded zero as the letter O and a one as I or l, so those letters are
turned back into digits when they sit in front of a digit before any
pattern is tried.
"""

import re
from collections.abc import Callable

_LETTER_ZERO = re.compile(r"[Oo](?=\d)")
_LETTER_ONE = re.compile(r"[Il](?=\d)")

_LABELLED = re.compile(
    r"(?:REGISTRO|MATR[IÍ]CULA|REG\.?|MAT\.?)[:\s]*(\d{8,9})\b",
    re.IGNORECASE,
)
_INSTITUTIONAL_PREFIX = re.compile(r"\b(222\d{6})\b")
_NINE_DIGITS = re.compile(r"\b(\d{9})\b")
_EIGHT_DIGITS = re.compile(r"\b(\d{8})\b")

RegistrationStrategy = Callable[[str], str | None]


def fix_digit_confusions(text: str) -> str:
    """Replace O/o and I/l that precede a digit with 0 and 1."""
    return _LETTER_ONE.sub("1", _LETTER_ZERO.sub("0", text))


def _search(pattern: re.Pattern[str]) -> RegistrationStrategy:
    def strategy(text: str) -> str | None:
        match = pattern.search(text)
        return match.group(1) if match else None

    strategy.__name__ = f"search_{pattern.pattern}"
    return strategy


# Most specific first: an explicit label, the institutional prefix,
# then any standalone 9 or 8 digit run.
REGISTRATION_STRATEGIES: tuple[RegistrationStrategy, ...] = (
    _search(_LABELLED),
    _search(_INSTITUTIONAL_PREFIX),
    _search(_NINE_DIGITS),
    _search(_EIGHT_DIGITS),
)


def extract_registration_number(text: str) -> str | None:
    cleaned = fix_digit_confusions(text)
    for strategy in REGISTRATION_STRATEGIES:
        found = strategy(cleaned)
        if found:
            return found
    return None
