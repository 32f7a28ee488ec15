"""gyz - Upload images to Gyazo from the command line.

Uploads image files and folders to Gyazo in parallel, with optional
EXIF-derived capture times and descriptions.
"""

__version__ = "0.1.0"

from .models import ExifSummary, UploadOption, UploadOutcome, UploadTask

__all__ = [
    "__version__",
    "ExifSummary",
    "UploadOption",
    "UploadOutcome",
    "UploadTask",
]
