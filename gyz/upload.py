"""Gyazo upload client.

Manages the authenticated HTTP session, multipart request assembly,
EXIF-derived field overrides, and response decoding.
"""

import logging
import mimetypes
import os
from typing import Any

import requests
from requests_toolbelt.multipart.encoder import MultipartEncoder

from . import __version__
from .errors import DecodeError, EncodingError, NetworkError, ServiceError
from .exif import read_exif_summary
from .models import ExifSummary, GyazoConfig, UploadOption, UploadResponse

logger = logging.getLogger(__name__)

IMAGE_FIELD = "imagedata"


def init_session(access_token: str) -> requests.Session:
    """Create an HTTP session that presents the access token.

    Args:
        access_token: Gyazo OAuth access token

    Returns:
        requests.Session with Authorization and User-Agent headers set
    """
    session = requests.Session()
    session.headers.update({
        "Authorization": f"Bearer {access_token}",
        "User-Agent": f"gyz/{__version__}",
    })
    return session


def merge_description(desc: str, extra: str) -> str:
    """Append extra text to a description after a blank line.

    Args:
        desc: Existing description (may be empty)
        extra: Text to append (may be empty)

    Returns:
        Combined description
    """
    if not extra:
        return desc
    if not desc:
        return extra
    return f"{desc}\n\n{extra}"


def build_form_fields(
    option: UploadOption,
    exif: ExifSummary | None = None,
) -> dict[str, str]:
    """Build the text fields of an upload request.

    Empty or zero values are left out. When EXIF data is given, its
    capture time replaces created_at and its description is appended
    to desc.

    Args:
        option: Upload option for the run
        exif: EXIF summary of the file, if any

    Returns:
        Mapping of form field name to value
    """
    desc = option.desc
    created_at = option.created_at
    if exif is not None:
        desc = merge_description(desc, exif.description)
        if exif.captured_at is not None:
            created_at = exif.captured_at

    fields = {}
    if option.access_policy:
        fields["access_policy"] = option.access_policy
    if option.metadata_is_public:
        fields["metadata_is_public"] = "true"
    if option.referer_url:
        fields["referer_url"] = option.referer_url
    if option.app:
        fields["app"] = option.app
    if option.title:
        fields["title"] = option.title
    if desc:
        fields["desc"] = desc
    if created_at is not None:
        # Naive datetimes are taken as local time
        fields["created_at"] = str(int(created_at.timestamp()))
    if option.collection_id:
        fields["collection_id"] = option.collection_id
    return fields


def build_multipart(
    file_path: str,
    file_obj: Any,
    fields: dict[str, str],
) -> MultipartEncoder:
    """Assemble a streaming multipart body.

    Args:
        file_path: Path of the image (used for filename and content type)
        file_obj: Open binary file to stream
        fields: Text fields to send alongside the image

    Returns:
        MultipartEncoder ready to be used as a request body

    Raises:
        EncodingError: If the body cannot be assembled
    """
    content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
    parts: dict[str, Any] = dict(fields)
    parts[IMAGE_FIELD] = (os.path.basename(file_path), file_obj, content_type)
    try:
        return MultipartEncoder(fields=parts)
    except (TypeError, ValueError, OSError) as e:
        raise EncodingError(f"failed to build request body for {file_path}: {e}") from e


def check_response_status(response: requests.Response) -> None:
    """Raise ServiceError unless the response has a 2xx status.

    Args:
        response: Response from the upload endpoint

    Raises:
        ServiceError: For any non-2xx status
    """
    if 200 <= response.status_code < 300:
        return
    detail = (response.text or "").strip()
    if len(detail) > 200:
        detail = detail[:200] + "..."
    message = f"upload failed with HTTP {response.status_code}"
    if detail:
        message = f"{message}: {detail}"
    raise ServiceError(message, status_code=response.status_code)


def parse_upload_response(response: requests.Response) -> UploadResponse:
    """Decode the JSON body of a successful upload.

    Args:
        response: Response from the upload endpoint

    Returns:
        UploadResponse

    Raises:
        DecodeError: If the body is not JSON or lacks a permalink URL
    """
    try:
        data = response.json()
    except ValueError as e:
        raise DecodeError(f"invalid JSON in upload response: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError("upload response is not a JSON object")

    permalink_url = data.get("permalink_url")
    if not isinstance(permalink_url, str) or not permalink_url:
        raise DecodeError("upload response has no permalink_url")

    metadata = data.get("metadata")
    return UploadResponse(
        permalink_url=permalink_url,
        image_id=str(data.get("image_id") or ""),
        thumb_url=str(data.get("thumb_url") or ""),
        type=str(data.get("type") or ""),
        metadata=metadata if isinstance(metadata, dict) else {},
    )


class GyazoClient:
    """Uploads images to Gyazo.

    The session is created once and shared by every upload. It is only
    used to issue requests, so one client can serve many worker threads.
    """

    def __init__(self, config: GyazoConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session if session is not None else init_session(config.access_token)

    def upload(self, file_path: str, option: UploadOption) -> str:
        """Upload a single image and return its permalink URL.

        Args:
            file_path: Path to the image
            option: Upload option for the run

        Returns:
            Permalink URL of the uploaded image

        Raises:
            OSError: If the file cannot be opened
            EncodingError: If EXIF decoding or body assembly fails
            NetworkError: If the request cannot be completed
            ServiceError: If the service returns a non-2xx status
            DecodeError: If the response body is malformed
        """
        with open(file_path, "rb") as f:
            exif = read_exif_summary(file_path) if option.enable_exif else None
            fields = build_form_fields(option, exif)
            encoder = build_multipart(file_path, f, fields)

            logger.info("uploading %s", file_path)
            try:
                response = self.session.post(
                    self.config.upload_url,
                    data=encoder,
                    headers={"Content-Type": encoder.content_type},
                    timeout=self.config.timeout,
                )
            except requests.RequestException as e:
                raise NetworkError(f"request failed for {file_path}: {e}") from e

        try:
            check_response_status(response)
            result = parse_upload_response(response)
        finally:
            response.close()

        logger.info("uploaded %s -> %s", file_path, result.permalink_url)
        return result.permalink_url

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()
