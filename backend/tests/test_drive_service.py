"""Tests for upload placement on disk."""

import pytest

from daily_tracker.drive.service import (
    UploadRejected,
    remove_user_uploads,
    safe_filename,
    save_upload,
    user_upload_dir,
)

MB = 1024 * 1024


class TestSafeFilename:
    def test_drops_directories(self):
        assert safe_filename("../../etc/passwd") == "passwd"

    def test_replaces_unsafe_characters(self):
        assert safe_filename("my cv (final)?.pdf") == "my cv _final_.pdf"

    def test_empty(self):
        assert safe_filename(None) == "upload"
        assert safe_filename("..") == "upload"


class TestSaveUpload:
    def test_writes_under_user_directory(self, tmp_path):
        path = save_upload(str(tmp_path), "user-1", "cv.pdf", "application/pdf", b"%PDF-1.4", 10 * MB)
        assert path.parent == tmp_path / "user-1"
        assert path.name.endswith("-cv.pdf")
        assert path.read_bytes() == b"%PDF-1.4"

    def test_same_name_does_not_collide(self, tmp_path):
        first = save_upload(str(tmp_path), "user-1", "cv.pdf", "application/pdf", b"a", MB)
        second = save_upload(str(tmp_path), "user-1", "cv.pdf", "application/pdf", b"b", MB)
        assert first != second

    def test_rejects_other_types(self, tmp_path):
        with pytest.raises(UploadRejected) as exc:
            save_upload(str(tmp_path), "user-1", "run.exe", "application/x-msdownload", b"MZ", MB)
        assert exc.value.status_code == 400

    def test_rejects_large_files(self, tmp_path):
        with pytest.raises(UploadRejected) as exc:
            save_upload(str(tmp_path), "user-1", "big.png", "image/png", b"x" * (MB + 1), MB)
        assert exc.value.status_code == 413
        assert not (tmp_path / "user-1").exists()

    def test_rejects_empty_files(self, tmp_path):
        with pytest.raises(UploadRejected):
            save_upload(str(tmp_path), "user-1", "a.png", "image/png", b"", MB)


class TestRemoveUserUploads:
    def test_removes_directory(self, tmp_path):
        save_upload(str(tmp_path), "user-1", "a.png", "image/png", b"png", MB)
        save_upload(str(tmp_path), "user-2", "b.png", "image/png", b"png", MB)
        assert remove_user_uploads(str(tmp_path), "user-1")
        assert not user_upload_dir(str(tmp_path), "user-1").exists()
        assert user_upload_dir(str(tmp_path), "user-2").exists()

    def test_nothing_to_remove(self, tmp_path):
        assert not remove_user_uploads(str(tmp_path), "user-1")
