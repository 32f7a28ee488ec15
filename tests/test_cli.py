"""Tests for cli.py module.

Tests the upload command end to end with a mocked Gyazo client.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gyz import __version__
from gyz.cli import app, normalize_args
from gyz.errors import ServiceError
from gyz.models import UploadOption


URL = "https://gyazo.com/0123456789abcdef"

runner = CliRunner()


@pytest.fixture
def token_env(monkeypatch):
    monkeypatch.setenv("GYAZO_ACCESS_TOKEN", "test_token")


@pytest.fixture
def mock_client():
    """Patch the Gyazo client used by the CLI."""
    with patch('gyz.cli.GyazoClient') as client_class:
        client = client_class.return_value
        client.upload.return_value = URL
        yield client


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"png")
    return path


class TestUploadCommand:
    """Tests for the upload command."""

    def test_requires_access_token(self, monkeypatch, mock_client, image):
        """Should refuse to run without an access token."""
        monkeypatch.delenv("GYAZO_ACCESS_TOKEN", raising=False)

        result = runner.invoke(app, ["upload", str(image)])

        assert result.exit_code == 1
        assert "GYAZO_ACCESS_TOKEN" in result.output
        mock_client.upload.assert_not_called()

    def test_uploads_with_flag_options(self, token_env, mock_client, image):
        """Should upload with options built from flags and print the URL."""
        result = runner.invoke(app, [
            "upload", str(image),
            "--app", "camera",
            "--desc", "hello",
            "--access-policy", "only_me",
            "--metadata-is-public",
            "--exif",
        ])

        assert result.exit_code == 0, result.output
        assert URL in result.output
        mock_client.upload.assert_called_once_with(str(image), UploadOption(
            access_policy="only_me",
            metadata_is_public=True,
            enable_exif=True,
            app="camera",
            desc="hello",
        ))
        mock_client.close.assert_called_once()

    def test_no_flags_uses_zero_option(self, token_env, mock_client, image):
        """Should upload with the empty option when no flag is set."""
        result = runner.invoke(app, ["upload", str(image)])

        assert result.exit_code == 0, result.output
        mock_client.upload.assert_called_once_with(str(image), UploadOption())

    def test_failed_upload_exits_non_zero(self, token_env, mock_client, image, tmp_path):
        """Should exit 1 when any upload fails, after trying every file."""
        other = tmp_path / "other.png"
        other.write_bytes(b"png")

        def fake_upload(path, option):
            if path == str(image):
                raise ServiceError("upload failed with HTTP 500", status_code=500)
            return URL

        mock_client.upload.side_effect = fake_upload

        result = runner.invoke(app, ["upload", str(image), str(other)])

        assert result.exit_code == 1
        assert mock_client.upload.call_count == 2
        assert URL in result.output

    def test_interactive_cancel_uploads_nothing(self, token_env, mock_client, image):
        """Should abort before uploading when the prompt is cancelled."""
        with patch('gyz.options.Prompt.ask', side_effect=KeyboardInterrupt):
            result = runner.invoke(app, ["upload", "-i", str(image)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        mock_client.upload.assert_not_called()

    def test_interactive_answers_are_used(self, token_env, mock_client, image):
        """Should upload with the options given at the prompt."""
        with patch('gyz.options.Prompt.ask', side_effect=["only_me", "gyz", ""]), \
                patch('gyz.options.Confirm.ask', side_effect=[False, False]):
            result = runner.invoke(app, ["upload", "--interactive", str(image)])

        assert result.exit_code == 0, result.output
        mock_client.upload.assert_called_once_with(
            str(image), UploadOption(access_policy="only_me", app="gyz")
        )

    def test_invalid_access_policy(self, token_env, mock_client, image):
        """Should exit 1 for an unknown access policy."""
        result = runner.invoke(app, ["upload", "--access-policy", "public", str(image)])

        assert result.exit_code == 1
        mock_client.upload.assert_not_called()

    def test_markup_in_error_is_printed_literally(self, token_env, mock_client, image):
        """Should print an error containing markup brackets without crashing."""
        result = runner.invoke(app, ["upload", "--access-policy", "[/]", str(image)])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Configuration error" in result.output
        assert "[/]" in result.output
        mock_client.upload.assert_not_called()

    def test_invalid_parallel(self, token_env, mock_client, image):
        """Should reject a parallel width below one."""
        result = runner.invoke(app, ["upload", "-p", "0", str(image)])

        assert result.exit_code != 0
        mock_client.upload.assert_not_called()

    def test_no_images_found(self, token_env, mock_client, tmp_path):
        """Should succeed without uploading when nothing matches."""
        (tmp_path / "notes.txt").write_text("hi")

        result = runner.invoke(app, ["upload", str(tmp_path)])

        assert result.exit_code == 0
        assert "No supported images found" in result.output
        mock_client.upload.assert_not_called()

    def test_markdown_output(self, token_env, mock_client, image):
        """Should print Markdown image tags."""
        result = runner.invoke(app, ["upload", "-o", "markdown", "-q", str(image)])

        assert result.exit_code == 0, result.output
        assert f"![shot]({URL})" in result.output

    def test_unknown_output_format(self, token_env, mock_client, image):
        result = runner.invoke(app, ["upload", "-o", "xml", str(image)])

        assert result.exit_code == 1
        mock_client.upload.assert_not_called()

    @patch('gyz.cli.copy_to_clipboard', return_value=True)
    def test_copy_to_clipboard(self, mock_copy, token_env, mock_client, image):
        """Should copy the URLs when --copy is given."""
        result = runner.invoke(app, ["upload", "--copy", str(image)])

        assert result.exit_code == 0, result.output
        mock_copy.assert_called_once_with(URL)

    def test_version(self):
        """Should print the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestNormalizeArgs:
    """Tests for normalize_args function."""

    def test_paths_default_to_upload(self):
        assert normalize_args(["a.png", "dir"]) == ["upload", "a.png", "dir"]

    def test_flags_default_to_upload(self):
        assert normalize_args(["-p", "3", "a.png"]) == ["upload", "-p", "3", "a.png"]

    def test_explicit_upload(self):
        assert normalize_args(["upload", "a.png"]) == ["upload", "a.png"]

    def test_global_flags(self):
        assert normalize_args(["--help"]) == ["--help"]
        assert normalize_args(["--version"]) == ["--version"]

    def test_empty(self):
        assert normalize_args([]) == []
