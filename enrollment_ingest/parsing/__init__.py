from enrollment_ingest.parsing.models import ParsedDocument, SubjectKey, SubjectRecord
from enrollment_ingest.parsing.parser import DocumentParser

__all__ = ["DocumentParser", "ParsedDocument", "SubjectKey", "SubjectRecord"]
