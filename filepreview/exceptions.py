class ExtractionError(Exception):
    """Base class for every failure raised while building a preview."""

    def __init__(self, message: str, *, cause: Exception = None):
        super().__init__(message)
        self.__cause__ = cause


class ExtractionFileFormatNotSupportedError(ExtractionError):
    def __init__(
        self, file_path: str, message: str = None, *, cause: Exception = None
    ):
        self.file_path = file_path
        if message is None:
            message = f"Preview file format not supported: {file_path}"
        super().__init__(message, cause=cause)


class FormatError(ExtractionError):
    """The container or one of its entries cannot be read."""

    NOT_A_ZIP = "NotAZip"
    CORRUPT_ENTRY = "CorruptEntry"

    reason: str = CORRUPT_ENTRY

    def __init__(
        self, message: str, *, reason: str = None, cause: Exception = None
    ):
        super().__init__(message, cause=cause)
        if reason is not None:
            self.reason = reason


class NotAZipError(FormatError):
    reason = FormatError.NOT_A_ZIP


class CorruptEntryError(FormatError):
    reason = FormatError.CORRUPT_ENTRY


class ExtractionZipBombError(FormatError):
    """The package exceeds the configured ZIP-bomb limits."""


class ValidationError(ExtractionError):
    """A media candidate does not carry the image format it claims."""


class UpstreamError(ExtractionError):
    """A third-party parser failed; callers fall back to a simpler path."""


class ExtractionFailedError(ExtractionError):
    """Every extraction path for a file failed."""


class FetchError(ExtractionError):
    def __init__(self, location: str, message: str = None, *, cause: Exception = None):
        self.location = location
        if message is None:
            message = f"Failed to fetch file: {location}"
        super().__init__(message, cause=cause)


class ExtractionFileEncryptedError(ExtractionError):
    """The file is password protected; no fallback can read it."""
