"""Image file discovery for gyz.

Filters supported image types and expands user-supplied files and folders
into the flat list of paths to upload.
"""

import logging
import os
import stat
from typing import Iterable

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}


def is_supported_image(filename: str) -> bool:
    """Check if a filename has a supported image extension.

    Args:
        filename: File name or path

    Returns:
        True for .jpg, .jpeg, .png and .gif in any letter case
    """
    return os.path.splitext(filename)[1].lower() in SUPPORTED_EXTENSIONS


def _raise_walk_error(error: OSError) -> None:
    raise error


def scan_directory(directory: str) -> list[str]:
    """Recursively collect supported images below a directory.

    Entries are visited in sorted order so repeated runs over the same tree
    yield the same list.

    Args:
        directory: Directory to walk

    Returns:
        Paths of supported image files

    Raises:
        OSError: If any part of the tree cannot be listed
    """
    found = []
    for root, dirnames, filenames in os.walk(directory, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            if is_supported_image(name):
                found.append(os.path.join(root, name))
    return found


def resolve_paths(paths: Iterable[str]) -> list[str]:
    """Expand files and directories into the images to upload.

    Paths that cannot be stat'ed are skipped with a warning. Files that are
    not supported images are skipped silently. Input order is kept and
    duplicates are not removed.

    Args:
        paths: File or directory paths given by the user

    Returns:
        Flat list of image file paths

    Raises:
        OSError: If walking a directory fails
    """
    resolved = []

    for path in paths:
        try:
            info = os.stat(path)
        except OSError as e:
            logger.warning("skip file because of stat error: %s (%s)", path, e)
            continue

        if stat.S_ISDIR(info.st_mode):
            resolved.extend(scan_directory(path))
        elif stat.S_ISREG(info.st_mode) and is_supported_image(path):
            resolved.append(path)

    return resolved
