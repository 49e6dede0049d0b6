"""Subject table extraction.

Every matcher is anchored on the two token shapes printed on receipts:
subject codes are three letters followed by three digits (``INF412``) and
section codes are one letter followed by a letter or digit (``Z1``, ``SA``).

The matchers are tried in order against the same normalized text and the
first one that produces any row wins; rows from later matchers are never
merged in.
"""

import re
from collections.abc import Callable

from enrollment_ingest.parsing.models import SubjectRecord

UNKNOWN_SUBJECT = "MATERIA DESCONOCIDA"

_SUBJECT_NAME_CHARS = "A-ZÑÁÉÍÓÚÜ\\s.&"

_DIGIT_CONFUSION = re.compile(r"(?<=\d)[OoIl](?=\d)")
_WHITESPACE = re.compile(r"\s+")

_PIPE_ROW = re.compile(
    r"\|\s*([A-Z]{3}\d{3})\s*\|\s*([A-Z][A-Z0-9])\s*\|"
    r"\s*([A-ZÑÁÉÍÓÚÜ\s.0-9&]{5,}?)\s*\|",
    re.IGNORECASE,
)

# A day token only ends a row when a time follows it, so roman numerals
# such as "PROGRAMACION VI" stay part of the subject name.
_ROW_TERMINATOR = (
    r"(?=\s+(?:PRESENCIAL|VIRTUAL|HIBRIDA)\b"
    r"|\s+\d"
    r"|\s+(?:Ma|Lu|Mi|Ju|Vi|Sa|Do)\b\.?\s*\d"
    r"|\s+[A-Z]{3}\d{3}\b"
    r"|\s*$)"
)
_INLINE_ROW = re.compile(
    rf"\b([A-Z]{{3}}\d{{3}})\s+([A-Z][A-Z0-9])\s+([{_SUBJECT_NAME_CHARS}]{{5,}}?){_ROW_TERMINATOR}",
    re.IGNORECASE,
)
_NEXT_SUBJECT_CODE = re.compile(r"\b[A-Z]{3}\d{3}\b", re.IGNORECASE)
_MODALITY = re.compile(r"\b(PRESENCIAL|VIRTUAL|HIBRIDA)\b", re.IGNORECASE)
_LEVEL = re.compile(r"\b(\d+)\b")
_SCHEDULE = re.compile(r"(\d{1,2}:\d{2}\s*-\s*\d{1,2}:\d{2})")

_RELAXED_ROW = re.compile(r"\b([A-Z]{3})\s*(\d{3})\s+([A-Z][A-Z0-9])\b", re.IGNORECASE)
_RELAXED_NAME = re.compile(
    rf"\s+([{_SUBJECT_NAME_CHARS}]{{10,}}?)(?=\s+(?:PRESENCIAL|VIRTUAL|Ma|Lu|Mi|Ju|Vi|\||$))"
)

CONTEXT_WINDOW = 200
RELAXED_NAME_WINDOW = 80

SubjectMatcher = Callable[[str], list[SubjectRecord]]


def normalize_table_text(text: str) -> str:
    """Fix O/I/l read in place of a digit inside a digit run. Keeps newlines."""
    return _DIGIT_CONFUSION.sub(lambda m: "0" if m.group(0) in "Oo" else "1", text)


def _collapse(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def _subject(sigla: str, grupo: str, materia: str, **extra: str | None) -> SubjectRecord:
    return SubjectRecord(
        sigla=sigla.strip().upper(),
        grupo=grupo.strip().upper(),
        materia=_collapse(materia),
        **extra,
    )


def match_pipe_table(text: str) -> list[SubjectRecord]:
    """`| MAT101 | Z1 | CALCULO I | PRESENCIAL | ...` rows."""
    return [_subject(*match.groups()) for match in _PIPE_ROW.finditer(text)]


def _trailing_context(text: str, start: int) -> str:
    window = text[start : start + CONTEXT_WINDOW]
    next_code = _NEXT_SUBJECT_CODE.search(window)
    return window[: next_code.start()] if next_code else window


def _optional(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def match_inline_rows(text: str) -> list[SubjectRecord]:
    """`INF412 SA SISTEMAS OPERATIVOS PRESENCIAL 4 Ma 08:00-10:00` rows."""
    flat = _collapse(text)
    subjects: list[SubjectRecord] = []
    for match in _INLINE_ROW.finditer(flat):
        sigla, grupo, materia = match.groups()
        context = _trailing_context(flat, match.end())
        modality = _optional(_MODALITY, context)
        subjects.append(
            _subject(
                sigla,
                grupo,
                materia,
                modalidad=modality.upper() if modality else None,
                nivel=_optional(_LEVEL, context),
                horario=_optional(_SCHEDULE, context),
            )
        )
    return subjects


def match_relaxed_codes(text: str) -> list[SubjectRecord]:
    """`INF 412 SA` with a stray space inside the code; the name is best effort."""
    subjects: list[SubjectRecord] = []
    for match in _RELAXED_ROW.finditer(text):
        prefix, number, grupo = match.groups()
        after = text[match.end() : match.end() + RELAXED_NAME_WINDOW]
        name_match = _RELAXED_NAME.search(after)
        materia = name_match.group(1) if name_match else UNKNOWN_SUBJECT
        subjects.append(_subject(prefix + number, grupo, materia))
    return subjects


SUBJECT_MATCHERS: tuple[SubjectMatcher, ...] = (
    match_pipe_table,
    match_inline_rows,
    match_relaxed_codes,
)


def _unique(subjects: list[SubjectRecord]) -> tuple[SubjectRecord, ...]:
    # SubjectRecord hashes on (sigla, grupo); first occurrence wins.
    return tuple(dict.fromkeys(subjects))


def extract_subjects(text: str) -> tuple[SubjectRecord, ...]:
    normalized = normalize_table_text(text)
    for matcher in SUBJECT_MATCHERS:
        subjects = matcher(normalized)
        if subjects:
            return _unique(subjects)
    return ()
