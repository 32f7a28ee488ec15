"""Data models for gyz.

Contains data classes for upload options, per-file tasks, EXIF summaries,
service responses, and upload outcomes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


ACCESS_POLICIES = ("anyone", "only_me")


@dataclass(frozen=True)
class UploadOption:
    """How each image of a run should be uploaded.

    Built once per invocation and shared read-only by every worker.

    Attributes:
        access_policy: "anyone" or "only_me" (empty uses the service default)
        metadata_is_public: Whether URL/title/description are public
        enable_exif: Read EXIF data and use it for desc/created_at
        referer_url: Source URL of the capture
        app: Name of the application the capture came from
        title: Title of the capture
        desc: Free-form comment or tags
        created_at: Capture time (None lets EXIF or the service decide)
        collection_id: Collection the image should be added to
    """
    access_policy: str = ""
    metadata_is_public: bool = False
    enable_exif: bool = False
    referer_url: str = ""
    app: str = ""
    title: str = ""
    desc: str = ""
    created_at: Optional[datetime] = None
    collection_id: str = ""


@dataclass(frozen=True)
class UploadTask:
    """A single file queued for upload."""
    index: int
    path: str
    option: UploadOption


@dataclass(frozen=True)
class ExifSummary:
    """Capture details read from a file's EXIF block.

    Attributes:
        captured_at: Naive local capture time, if recorded
        description: Camera and exposure summary (e.g. "f/2.8 ISO100")
    """
    captured_at: Optional[datetime] = None
    description: str = ""

    @property
    def is_empty(self) -> bool:
        return self.captured_at is None and not self.description


@dataclass
class UploadResponse:
    """Decoded body of a successful upload.

    Attributes:
        permalink_url: Public page URL of the image
        image_id: Service image ID
        thumb_url: Thumbnail URL
        type: Image type reported by the service (png, jpg, ...)
        metadata: App/title/url/desc as stored by the service
    """
    permalink_url: str
    image_id: str = ""
    thumb_url: str = ""
    type: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class UploadOutcome:
    """Result of one upload attempt.

    Attributes:
        path: File that was uploaded
        url: Permalink URL on success
        error: Exception that stopped the upload on failure
    """
    path: str
    url: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.url is not None


@dataclass
class GyazoConfig:
    """Gyazo API configuration.

    Attributes:
        access_token: OAuth access token sent as a bearer credential
        upload_url: Upload endpoint
        timeout: Request timeout in seconds
    """
    access_token: str
    upload_url: str = "https://upload.gyazo.com/api/upload"
    timeout: float = 300.0
