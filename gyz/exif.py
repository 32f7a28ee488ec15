"""EXIF extraction for gyz.

Reads the capture time and a short camera/exposure summary from an image's
embedded EXIF block using Pillow.
"""

from datetime import datetime
from fractions import Fraction
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image

from .errors import ExifError
from .models import ExifSummary


EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


def read_exif_summary(path: str | Path) -> ExifSummary | None:
    """Decode the EXIF summary of an image file.

    The file is opened through its own handle, independent of any stream
    used for the upload body.

    Args:
        path: Path to the image

    Returns:
        ExifSummary, or None if the image carries no usable EXIF data

    Raises:
        ExifError: If the file cannot be decoded as an image or its EXIF
            block is corrupt
    """
    try:
        with Image.open(path) as image:
            exif = image.getexif()
            if not exif:
                return None
            base = dict(exif)
            details = dict(exif.get_ifd(ExifTags.IFD.Exif))
    except (OSError, SyntaxError, ValueError) as e:
        raise ExifError(f"failed to read EXIF from {path}: {e}") from e

    summary = ExifSummary(
        captured_at=parse_exif_datetime(
            details.get(ExifTags.Base.DateTimeOriginal) or base.get(ExifTags.Base.DateTime)
        ),
        description=describe_exif(base, details),
    )
    if summary.is_empty:
        return None
    return summary


def parse_exif_datetime(value: Any) -> datetime | None:
    """Parse an EXIF "YYYY:MM:DD HH:MM:SS" timestamp.

    Args:
        value: Raw tag value (str or bytes)

    Returns:
        Naive datetime, or None for missing/blank/invalid values
    """
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    value = str(value).strip("\x00 ")
    if not value:
        return None
    try:
        return datetime.strptime(value[:19], EXIF_DATETIME_FORMAT)
    except ValueError:
        # Cameras without a clock write "0000:00:00 00:00:00"
        return None


def describe_exif(base: dict[int, Any], details: dict[int, Any]) -> str:
    """Build a one-line camera and exposure summary.

    Example: "Canon EOS R5 RF50mm F1.8 STM 50mm f/2.8 1/200s ISO100"

    Args:
        base: Tags from IFD0 (Make, Model, ...)
        details: Tags from the Exif sub-IFD (FNumber, ISO, ...)

    Returns:
        Space-separated summary, empty if nothing useful is recorded
    """
    parts = []

    make = _text(base.get(ExifTags.Base.Make))
    model = _text(base.get(ExifTags.Base.Model))
    if model and make and not model.lower().startswith(make.lower()):
        parts.append(f"{make} {model}")
    elif model or make:
        parts.append(model or make)

    lens = _text(details.get(ExifTags.Base.LensModel))
    if lens:
        parts.append(lens)

    focal_length = _number(details.get(ExifTags.Base.FocalLength))
    if focal_length:
        parts.append(f"{_trim(focal_length)}mm")

    f_number = _number(details.get(ExifTags.Base.FNumber))
    if f_number:
        parts.append(f"f/{_trim(f_number)}")

    exposure = _number(details.get(ExifTags.Base.ExposureTime))
    if exposure:
        if exposure < 1:
            parts.append(f"1/{round(1 / exposure)}s")
        else:
            parts.append(f"{_trim(exposure)}s")

    iso = details.get(ExifTags.Base.ISOSpeedRatings)
    if isinstance(iso, (tuple, list)):
        iso = iso[0] if iso else None
    if iso:
        parts.append(f"ISO{int(iso)}")

    return " ".join(parts)


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if value is None:
        return ""
    return str(value).strip("\x00 ")


def _number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, tuple) and len(value) == 2:
        if not value[1]:
            return None
        return float(Fraction(value[0], value[1]))
    try:
        result = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    # IFDRational with a zero denominator is NaN
    if result != result:
        return None
    return result


def _trim(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")
