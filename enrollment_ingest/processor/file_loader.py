import mimetypes
from pathlib import Path

from enrollment_ingest.processor.exceptions import FileReadError, UnsupportedMediaTypeError
from enrollment_ingest.processor.models import RawDocument

mimetypes.add_type("image/webp", ".webp")

SUPPORTED_MIME_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/webp", "application/pdf"}
)


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "application/octet-stream"


class FileLoader:
    """Reads receipt files from disk into RawDocuments."""

    def load(self, path: Path, identity_id: str | None = None) -> RawDocument:
        """Read one file.

        Raises:
            UnsupportedMediaTypeError: if the file is not an image or PDF.
            FileReadError: if the file cannot be read.
        """
        mime_type = guess_mime_type(path)
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedMediaTypeError(
                f"{path.name}: unsupported type '{mime_type}'. "
                "Only images (JPEG, PNG, WebP) and PDFs are allowed."
            )
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Cannot read {path}: {exc}") from exc
        return RawDocument(
            data=data, mime_type=mime_type, file_name=path.name, identity_id=identity_id
        )

    def load_directory(self, directory: Path) -> list[RawDocument]:
        """Load every supported file of a directory, sorted by name.

        Raises:
            UnsupportedMediaTypeError: listing every rejected file at once.
        """
        if not directory.is_dir():
            raise FileReadError(f"Not a directory: {directory}")
        paths = sorted(p for p in directory.iterdir() if p.is_file() and not p.name.startswith("."))
        rejected = [p.name for p in paths if guess_mime_type(p) not in SUPPORTED_MIME_TYPES]
        if rejected:
            raise UnsupportedMediaTypeError(
                f"Invalid file types: {', '.join(rejected)}. "
                "Only images (JPEG, PNG, WebP) and PDFs are allowed."
            )
        return [self.load(p) for p in paths]
