"""Tests for media root path resolution and the local library scan."""

import hashlib
import logging
import os

import pytest

from fletnix.errors import MediaFileNotFoundError, PathTraversalError
from fletnix.storage import LocalMediaStorage, format_title, resolve_path


@pytest.fixture
def media_root(tmp_path):
    """A media root with a movie, a series folder and a file outside the root."""
    root = tmp_path / "media"
    (root / "movies").mkdir(parents=True)
    (root / "tv" / "The_Office").mkdir(parents=True)
    (root / "movies" / "big_buck.bunny.mp4").write_bytes(b"x" * 64)
    (tmp_path / "secret.txt").write_text("outside")
    return root


class TestResolvePath:
    """Tests for resolve_path."""

    def test_resolves_file_inside_root(self, media_root):
        path = resolve_path(media_root, "movies/big_buck.bunny.mp4")
        assert path == (media_root / "movies" / "big_buck.bunny.mp4").resolve()
        assert path.is_absolute()

    def test_dot_segments_inside_root_are_allowed(self, media_root):
        path = resolve_path(media_root, "tv/../movies/big_buck.bunny.mp4")
        assert path.name == "big_buck.bunny.mp4"

    def test_missing_file(self, media_root):
        with pytest.raises(MediaFileNotFoundError) as exc_info:
            resolve_path(media_root, "movies/missing.mp4")
        assert exc_info.value.status_code == 404

    def test_nul_byte_is_not_found(self, media_root):
        with pytest.raises(MediaFileNotFoundError) as exc_info:
            resolve_path(media_root, "movies/big_buck\x00.bunny.mp4")
        assert exc_info.value.status_code == 404

    def test_directory_is_not_a_file(self, media_root):
        with pytest.raises(MediaFileNotFoundError):
            resolve_path(media_root, "tv/The_Office")

    def test_traversal_to_existing_file(self, media_root):
        with pytest.raises(PathTraversalError) as exc_info:
            resolve_path(media_root, "../secret.txt")
        assert exc_info.value.status_code == 403
        assert exc_info.value.attempted_path == "../secret.txt"

    def test_traversal_to_missing_file_is_forbidden(self, media_root):
        """Existence outside the root is never revealed."""
        with pytest.raises(PathTraversalError):
            resolve_path(media_root, "../../../../etc/does-not-exist")

    def test_etc_passwd(self, media_root):
        with pytest.raises(PathTraversalError):
            resolve_path(media_root, "movies/../../../../../../etc/passwd")

    def test_sibling_directory_with_shared_prefix(self, tmp_path, media_root):
        """A sibling like /media2 must not pass as being inside /media."""
        sibling = tmp_path / "media2"
        sibling.mkdir()
        (sibling / "clip.mp4").write_bytes(b"x")

        with pytest.raises(PathTraversalError):
            resolve_path(media_root, "../media2/clip.mp4")

    def test_symlink_escaping_root(self, tmp_path, media_root):
        link = media_root / "movies" / "escape.mp4"
        os.symlink(tmp_path / "secret.txt", link)

        with pytest.raises(PathTraversalError):
            resolve_path(media_root, "movies/escape.mp4")

    def test_symlink_within_root(self, media_root):
        link = media_root / "tv" / "alias.mp4"
        os.symlink(media_root / "movies" / "big_buck.bunny.mp4", link)

        path = resolve_path(media_root, "tv/alias.mp4")
        assert path == (media_root / "movies" / "big_buck.bunny.mp4").resolve()

    def test_traversal_is_logged(self, media_root, caplog):
        with caplog.at_level(logging.WARNING, logger="fletnix.storage"):
            with pytest.raises(PathTraversalError):
                resolve_path(media_root, "../secret.txt")
        assert "../secret.txt" in caplog.text


class TestFormatTitle:
    """Tests for display title formatting."""

    def test_underscores_and_dots(self):
        assert format_title("big_buck.bunny") == "Big Buck Bunny"

    def test_keeps_existing_capitals(self):
        assert format_title("the_IT_crowd") == "The IT Crowd"

    def test_plain_name(self):
        assert format_title("Alien") == "Alien"


class TestLocalMediaStorage:
    """Tests for LocalMediaStorage."""

    def test_resolve_library_file(self, media_root):
        storage = LocalMediaStorage(media_dir=str(media_root))
        assert storage.resolve_library_file("movies", "big_buck.bunny.mp4").name == "big_buck.bunny.mp4"

    def test_library_file_traversal(self, media_root):
        storage = LocalMediaStorage(media_dir=str(media_root))
        with pytest.raises(PathTraversalError):
            storage.resolve_library_file("movies", "../../secret.txt")

    def test_thumbnail_cannot_leave_thumbnails_folder(self, media_root):
        storage = LocalMediaStorage(media_dir=str(media_root))
        with pytest.raises(PathTraversalError):
            storage.resolve_thumbnail("movies", "../../movies/big_buck.bunny.mp4")

    def test_scan_library(self, media_root):
        (media_root / "movies" / "notes.txt").write_text("not a video")
        (media_root / "movies" / "Alien.MKV").write_bytes(b"y" * 10)
        (media_root / "tv" / "stray-file.mp4").write_bytes(b"z")

        storage = LocalMediaStorage(media_dir=str(media_root))
        library = storage.scan_library()

        assert [movie["filename"] for movie in library["movies"]] == [
            "Alien.MKV",
            "big_buck.bunny.mp4",
        ]
        bunny = library["movies"][1]
        assert bunny["id"] == "movie_" + hashlib.md5(b"big_buck.bunny.mp4").hexdigest()
        assert bunny["title"] == "Big Buck Bunny"
        assert bunny["filepath"] == "/api/media/file/movies/big_buck.bunny.mp4"
        assert bunny["filesize"] == 64
        assert bunny["thumbnail_path"] == "/placeholder.jpg"

        assert len(library["series"]) == 1
        office = library["series"][0]
        assert office["title"] == "The Office"
        assert office["folderpath"] == "/api/media/file/tv/The_Office"
        assert office["thumbnail_path"] == "/placeholder-wide.jpg"

    def test_scan_uses_existing_thumbnail(self, media_root):
        thumb_name = hashlib.md5(b"big_buck.bunny.mp4").hexdigest() + ".jpg"
        thumbs = media_root / "thumbnails" / "movies"
        thumbs.mkdir(parents=True)
        (thumbs / thumb_name).write_bytes(b"\xff\xd8\xff")

        storage = LocalMediaStorage(media_dir=str(media_root))
        movie = storage.scan_library()["movies"][0]

        assert movie["thumbnail_path"] == f"/api/media/thumbnail/movies/{thumb_name}"

    def test_scan_missing_folders(self, tmp_path):
        storage = LocalMediaStorage(media_dir=str(tmp_path / "empty"))
        assert storage.scan_library() == {"movies": [], "series": []}
