"""Student name extraction.

Receipts come out of different OCR providers in very different shapes
(flowing text, markdown-like tables, one field per line), so the name is
looked for with several independent strategies. Each one returns a raw
candidate; candidates that contain header vocabulary are discarded and the
next strategy is tried.
"""

import re
from collections.abc import Callable

_LETTERS = "A-ZÑÁÉÍÓÚÜa-zñáéíóúü"
_UPPER = "A-ZÑÁÉÍÓÚÜ"

_NOISE_WORDS = re.compile(
    r"\b(?:PERIODO|NORMAL|MODALIDAD|LOCALIDAD|ORIGEN|INGENIER[IÍ]A|INFORM[AÁ]TICA|CARRERA)\b",
    re.IGNORECASE,
)

_BEFORE_CAREER = re.compile(
    rf"\d{{8,9}}\s+([{_LETTERS}\s]{{10,}}?)"
    r"\s+(?:CARRERA|INGENIER[IÍ]A|ING\.|LICENCIATURA|ORIGEN|\d{7}-[A-Z]{3})",
    re.IGNORECASE,
)
_TABLE_ROW = re.compile(
    rf"\|\s*\d{{8,9}}\s*\|\s*\|\s*([{_LETTERS}\s]+?)\s+\d{{5,}}-[A-Z]{{2,4}}\s*\|"
)
_BEFORE_ID_SUFFIX = re.compile(
    rf"([{_LETTERS}]{{3,}}(?:[ \t]+[{_LETTERS}]{{3,}}){{1,4}})[ \t]+\d{{5,}}-[A-Z]{{2,4}}"
)
_REGISTRATION_LINE = re.compile(r"\d{8,9}")
_NAME_LINE = re.compile(rf"^[{_LETTERS}\s]{{10,}}$")
_CAPITALIZED_WORDS = re.compile(rf"\b([{_UPPER}]{{3,}}\s+[{_UPPER}]{{3,}}(?:\s+[{_UPPER}]{{3,}})?)\b")

NameStrategy = Callable[[str], str | None]


def _first_group(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def name_before_career(text: str) -> str | None:
    """`223456789 Juan Perez Lopez INGENIERIA ...`"""
    return _first_group(_BEFORE_CAREER, text)


def name_in_table_row(text: str) -> str | None:
    """`| 248112233 |` followed by `| Vargas Cruz Camila 5192837-SCZ |`"""
    return _first_group(_TABLE_ROW, text)


def name_before_id_suffix(text: str) -> str | None:
    """`Vargas Cruz Camila 5192837-SCZ`"""
    return _first_group(_BEFORE_ID_SUFFIX, text)


def name_on_next_line(text: str) -> str | None:
    """The line right after the first line carrying a registration number."""
    lines = text.split("\n")
    for line, next_line in zip(lines, lines[1:]):
        if not _REGISTRATION_LINE.search(line):
            continue
        candidate = next_line.strip()
        if _NAME_LINE.match(candidate) and not _NOISE_WORDS.search(candidate):
            return candidate
    return None


def capitalized_words(text: str) -> str | None:
    return _first_group(_CAPITALIZED_WORDS, text)


NAME_STRATEGIES: tuple[NameStrategy, ...] = (
    name_before_career,
    name_in_table_row,
    name_before_id_suffix,
    name_on_next_line,
    capitalized_words,
)


def _clean(candidate: str) -> str:
    return re.sub(r"\s+", " ", candidate).strip()


def is_noise(candidate: str) -> bool:
    return bool(_NOISE_WORDS.search(candidate))


def extract_student_name(text: str) -> str | None:
    for strategy in NAME_STRATEGIES:
        candidate = strategy(text)
        if not candidate:
            continue
        name = _clean(candidate)
        if name and not is_noise(name):
            return name
    return None
