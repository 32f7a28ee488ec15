"""Upload error types for gyz.

Every failure that stops a single file's upload derives from UploadError,
so the pipeline can contain it to that file.
"""


class UploadError(Exception):
    """Base class for per-file upload failures."""
    pass


class EncodingError(UploadError):
    """Raised when the request body cannot be assembled."""
    pass


class ExifError(EncodingError):
    """Raised when EXIF data was requested but could not be decoded."""
    pass


class NetworkError(UploadError):
    """Raised when the request could not be sent or no response arrived."""
    pass


class ServiceError(UploadError):
    """Raised when the service answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the service
    """

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(UploadError):
    """Raised when a success response body cannot be decoded."""
    pass
