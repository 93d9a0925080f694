import enum
import mimetypes
import os

DOCX_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PPTX_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.presentationml.presentation"
)


class DocumentKind(enum.Enum):
    WORD_DOCUMENT = "docx"
    SPREADSHEET = "xlsx"
    PRESENTATION = "pptx"
    UNSUPPORTED = "unsupported"


MIME_TYPE_MAPPING = {
    DOCX_CONTENT_TYPE: DocumentKind.WORD_DOCUMENT,
    XLSX_CONTENT_TYPE: DocumentKind.SPREADSHEET,
    PPTX_CONTENT_TYPE: DocumentKind.PRESENTATION,
}

# mimetypes does not know the OOXML extensions on every platform
EXTENSION_MAPPING = {
    ".docx": DOCX_CONTENT_TYPE,
    ".xlsx": XLSX_CONTENT_TYPE,
    ".pptx": PPTX_CONTENT_TYPE,
}

_DEFAULT_FILENAMES = {
    DocumentKind.WORD_DOCUMENT: "document.docx",
    DocumentKind.SPREADSHEET: "workbook.xlsx",
    DocumentKind.PRESENTATION: "presentation.pptx",
}


def classify(content_type: str | None) -> DocumentKind:
    """Map a content type to a DocumentKind by exact, case-sensitive match."""
    if not content_type:
        return DocumentKind.UNSUPPORTED
    return MIME_TYPE_MAPPING.get(content_type, DocumentKind.UNSUPPORTED)


def is_supported_content_type(content_type: str | None) -> bool:
    return classify(content_type) is not DocumentKind.UNSUPPORTED


def content_type_for_kind(kind: DocumentKind) -> str:
    """Return the OOXML content type of ``kind``; unsupported kinds map to DOCX."""
    for content_type, mapped in MIME_TYPE_MAPPING.items():
        if mapped is kind:
            return content_type
    return DOCX_CONTENT_TYPE


def suggested_filename(kind: DocumentKind) -> str:
    """Default file name for saving a document of ``kind``."""
    return _DEFAULT_FILENAMES.get(kind, "document.docx")


def suggested_extension(kind: DocumentKind) -> str:
    return os.path.splitext(suggested_filename(kind))[1]


def guess_content_type(path: str) -> str | None:
    """Guess a content type from the extension of ``path``."""
    extension = os.path.splitext(path.lower())[1]
    if extension in EXTENSION_MAPPING:
        return EXTENSION_MAPPING[extension]
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type
