"""Upload option construction for gyz.

Builds the single UploadOption used for a run, either from command-line
flags or from an interactive Rich prompt session.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .config import ConfigError
from .models import ACCESS_POLICIES, UploadOption


DEFAULT_ACCESS_POLICY = "anyone"
DEFAULT_APP = "gyz"


@dataclass(frozen=True)
class FlagSource:
    """Options given as flat flag values (e.g. from the CLI)."""
    flags: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InteractiveSource:
    """Options asked from the user on the terminal."""
    console: Optional[Console] = None


OptionSource = Union[FlagSource, InteractiveSource]


def build_upload_option(source: OptionSource) -> UploadOption:
    """Build the upload option for a run.

    Args:
        source: FlagSource or InteractiveSource

    Returns:
        Immutable UploadOption

    Raises:
        ConfigError: If a flag is invalid or the prompt session is cancelled
    """
    if isinstance(source, InteractiveSource):
        return prompt_upload_option(source.console)
    if isinstance(source, FlagSource):
        return build_option_from_flags(source.flags)
    raise TypeError(f"Unknown option source: {source!r}")


def build_option_from_flags(flags: Mapping[str, Any]) -> UploadOption:
    """Build an UploadOption from flag values.

    Missing or empty flags leave the field at its zero value.

    Args:
        flags: Mapping with any of desc, app, title, referer_url,
            collection_id, access_policy, metadata_is_public, exif,
            created_at

    Returns:
        UploadOption

    Raises:
        ConfigError: If access_policy or created_at is invalid
    """
    access_policy = _flag_text(flags, "access_policy")
    if access_policy and access_policy not in ACCESS_POLICIES:
        raise ConfigError(
            f"Invalid access policy {access_policy!r}: "
            f"expected one of {', '.join(ACCESS_POLICIES)}"
        )

    return UploadOption(
        access_policy=access_policy,
        metadata_is_public=bool(flags.get("metadata_is_public")),
        enable_exif=bool(flags.get("exif")),
        referer_url=_flag_text(flags, "referer_url"),
        app=_flag_text(flags, "app"),
        title=_flag_text(flags, "title"),
        desc=_flag_text(flags, "desc"),
        created_at=parse_created_at(flags.get("created_at")),
        collection_id=_flag_text(flags, "collection_id"),
    )


def parse_created_at(value: Any) -> datetime | None:
    """Parse a created-at flag value.

    Args:
        value: None, empty string, datetime or ISO 8601 text

    Returns:
        datetime or None

    Raises:
        ConfigError: If the text is not a valid ISO 8601 timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ConfigError(f"Invalid created-at timestamp: {value!r}")


def prompt_upload_option(console: Console | None = None) -> UploadOption:
    """Ask the user for upload options.

    Args:
        console: Console to prompt on (defaults to a new one)

    Returns:
        UploadOption with the user's answers

    Raises:
        ConfigError: If the user aborts the session
    """
    try:
        access_policy = Prompt.ask(
            "Access policy",
            choices=list(ACCESS_POLICIES),
            default=DEFAULT_ACCESS_POLICY,
            console=console,
        )
        metadata_is_public = Confirm.ask(
            "Make metadata (URL, title, description) public?",
            default=False,
            console=console,
        )
        enable_exif = Confirm.ask(
            "Use EXIF data?",
            default=False,
            console=console,
        )
        app = Prompt.ask(
            "App (application the capture came from)",
            default=DEFAULT_APP,
            console=console,
        )
        desc = Prompt.ask(
            "Description (comments or tags)",
            default="",
            show_default=False,
            console=console,
        )
    except (KeyboardInterrupt, EOFError):
        raise ConfigError("Interactive input was cancelled")

    return UploadOption(
        access_policy=access_policy,
        metadata_is_public=metadata_is_public,
        enable_exif=enable_exif,
        app=app.strip(),
        desc=desc.strip(),
    )


def _flag_text(flags: Mapping[str, Any], name: str) -> str:
    value = flags.get(name)
    if value is None:
        return ""
    return str(value).strip()
