from enrollment_ingest.logging.logger import Log
from enrollment_ingest.parsing.models import ParsedDocument
from enrollment_ingest.parsing.registration import extract_registration_number
from enrollment_ingest.parsing.student_name import extract_student_name
from enrollment_ingest.parsing.subjects import extract_subjects


class DocumentParser:
    """Turns an OCR transcript into a ParsedDocument.

    Parsing never raises for garbled input: a transcript missing the
    registration number, the student name or every subject row yields a
    ParsedDocument with ``is_valid=False``.
    """

    def parse(self, text: str) -> ParsedDocument:
        Log.debug(f"Parsing transcript ({len(text)} chars): {text[:500]!r}")

        registration_number = extract_registration_number(text)
        student_name = extract_student_name(text)
        subjects = extract_subjects(text)

        is_valid = bool(registration_number and student_name and subjects)
        Log.debug(
            f"Parsed registration={registration_number!r} name={student_name!r} "
            f"subjects={len(subjects)} valid={is_valid}"
        )
        return ParsedDocument(
            is_valid=is_valid,
            registration_number=registration_number or "",
            student_name=student_name or "",
            subjects=subjects,
        )
