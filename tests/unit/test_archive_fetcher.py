"""Tests for archive_fetcher module.

Tests cover:
- Downloading the archive with requests (mocked)
- Extracting page files into a staging directory
- Rejecting corrupt, truncated, unsafe and empty archives
"""

import io
import tarfile
from unittest.mock import Mock, patch

import pytest
import requests

from conftest import DEFAULT_PAGES, TAR_PAGE, build_archive
from quickref.cache.archive_fetcher import STAGING_PREFIX, ArchiveFetcher
from quickref.errors import ArchiveError, NetworkError

ARCHIVE_URL = "https://example.com/tldr/archive/main.tar.gz"


def make_response(chunks, status_error=None):
    response = Mock()
    response.iter_content.return_value = iter(chunks)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestFetch:
    """Test downloading the archive."""

    @patch("quickref.cache.archive_fetcher.requests.get")
    def test_fetch_returns_rewound_stream(self, mock_get):
        """Test the downloaded body is returned from the start."""
        mock_get.return_value = make_response([b"abc", b"def"])

        with ArchiveFetcher().fetch(ARCHIVE_URL) as stream:
            assert stream.read() == b"abcdef"

    @patch("quickref.cache.archive_fetcher.requests.get")
    def test_fetch_single_request_with_timeout(self, mock_get):
        """Test one streamed GET is made with the configured timeout."""
        mock_get.return_value = make_response([b"x"])

        ArchiveFetcher(timeout=5).fetch(ARCHIVE_URL).close()

        mock_get.assert_called_once_with(ARCHIVE_URL, stream=True, timeout=5)
        mock_get.return_value.close.assert_called_once()

    @patch("quickref.cache.archive_fetcher.requests.get")
    def test_fetch_default_timeout(self, mock_get):
        """Test the default timeout is applied."""
        mock_get.return_value = make_response([b"x"])

        ArchiveFetcher().fetch(ARCHIVE_URL).close()

        assert mock_get.call_args.kwargs["timeout"] == ArchiveFetcher.DEFAULT_TIMEOUT

    @patch("quickref.cache.archive_fetcher.requests.get")
    def test_fetch_connection_error(self, mock_get):
        """Test transport failures raise NetworkError."""
        mock_get.side_effect = requests.ConnectionError("Name or service not known")

        with pytest.raises(NetworkError, match="Failed to download"):
            ArchiveFetcher().fetch(ARCHIVE_URL)

    @patch("quickref.cache.archive_fetcher.requests.get")
    def test_fetch_http_error(self, mock_get):
        """Test non-2xx responses raise NetworkError and close the response."""
        mock_get.return_value = make_response([], status_error=requests.HTTPError("404 Not Found"))

        with pytest.raises(NetworkError, match="404"):
            ArchiveFetcher().fetch(ARCHIVE_URL)
        mock_get.return_value.close.assert_called_once()

    @patch("quickref.cache.archive_fetcher.requests.get")
    def test_fetch_interrupted_body(self, mock_get):
        """Test a connection dropped mid-body raises NetworkError."""

        def broken_body(chunk_size):
            yield b"partial"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        response = Mock()
        response.iter_content.side_effect = broken_body
        mock_get.return_value = response

        with pytest.raises(NetworkError):
            ArchiveFetcher().fetch(ARCHIVE_URL)


class TestExtract:
    """Test extracting pages into a staging directory."""

    def test_extract_pages_by_platform(self, tmp_path):
        """Test pages land in one subdirectory per platform."""
        staged = ArchiveFetcher().extract(io.BytesIO(build_archive(DEFAULT_PAGES)), tmp_path)

        assert staged.parent == tmp_path
        assert staged.name.startswith(STAGING_PREFIX)
        assert (staged / "common" / "tar.md").read_text(encoding="utf-8") == TAR_PAGE
        assert (staged / "linux" / "ls.md").is_file()
        assert (staged / "osx" / "pbcopy.md").is_file()

    def test_extract_skips_non_page_entries(self, tmp_path, archive_bytes):
        """Test translations and repository files are not extracted."""
        staged = ArchiveFetcher().extract(io.BytesIO(archive_bytes), tmp_path)

        assert sorted(p.name for p in staged.iterdir()) == ["common", "linux", "osx"]
        assert not (staged / "README.md").exists()

    def test_extract_without_wrapper_directory(self, tmp_path):
        """Test archives rooted directly at pages/ are accepted."""
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            data = TAR_PAGE.encode("utf-8")
            info = tarfile.TarInfo("pages/common/tar.md")
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))

        staged = ArchiveFetcher().extract(io.BytesIO(buffer.getvalue()), tmp_path)

        assert (staged / "common" / "tar.md").is_file()

    def test_extract_truncated_archive(self, tmp_path, archive_bytes):
        """Test a truncated stream raises ArchiveError and leaves no staging directory."""
        truncated = archive_bytes[: len(archive_bytes) // 2]

        with pytest.raises(ArchiveError):
            ArchiveFetcher().extract(io.BytesIO(truncated), tmp_path)

        assert list(tmp_path.iterdir()) == []

    def test_extract_not_gzip(self, tmp_path):
        """Test non-gzip data raises ArchiveError."""
        with pytest.raises(ArchiveError):
            ArchiveFetcher().extract(io.BytesIO(b"<html>not an archive</html>"), tmp_path)

        assert list(tmp_path.iterdir()) == []

    def test_extract_unsafe_path(self, tmp_path):
        """Test entries escaping the archive raise ArchiveError."""
        payload = build_archive({}, extra={"../../evil.md": "# evil\n"})

        with pytest.raises(ArchiveError, match="Unsafe path"):
            ArchiveFetcher().extract(io.BytesIO(payload), tmp_path)

        assert not (tmp_path.parent / "evil.md").exists()

    def test_extract_archive_without_pages(self, tmp_path):
        """Test an archive with no pages raises ArchiveError."""
        payload = build_archive({}, extra={"README.md": "# tldr\n"})

        with pytest.raises(ArchiveError, match="does not contain any pages"):
            ArchiveFetcher().extract(io.BytesIO(payload), tmp_path)

        assert list(tmp_path.iterdir()) == []
