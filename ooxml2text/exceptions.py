class ExtractionError(Exception):
    """Base class for all errors raised while reading or writing a package."""

    def __init__(self, message: str, *, cause: Exception = None):
        super().__init__(message)
        self.__cause__ = cause  # Optional chaining for debugging


class ContainerFormatError(ExtractionError):
    """Raised when the byte stream is not a readable ZIP package."""


class ExtractionZipBombError(ContainerFormatError):
    """Raised when a package exceeds the configured ZIP-bomb limits."""


class ExtractionFileEncryptedError(ContainerFormatError):
    """Raised when a package is encrypted or password-protected."""


class XmlFormatError(ExtractionError):
    """Raised when a package part is not well-formed XML."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        cause: Exception = None,
    ):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message, cause=cause)


class ExtractionFileFormatNotSupportedError(ExtractionError):
    """Raised when the file format for extraction is not supported."""

    def __init__(self, file_path: str, message: str = None, *, cause: Exception = None):
        self.file_path = file_path
        if message is None:
            message = f"Extraction file format not supported: {file_path}"
        super().__init__(message, cause=cause)
