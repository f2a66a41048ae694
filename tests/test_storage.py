"""Tests for item image storage."""
import io

import pytest

from wms.error_handlers import ImageRejectedError
from wms.storage import LocalObjectStorage, sniff_image


class TestSniffImage:

    def test_png_detected(self, png_bytes):
        assert sniff_image(png_bytes) == "PNG"

    def test_garbage(self):
        assert sniff_image(b"%PDF-1.4 not an image") is None


class TestValidateImage:

    def test_oversize(self, tmp_path, png_bytes):
        storage = LocalObjectStorage(root=str(tmp_path), max_size=10)

        with pytest.raises(ImageRejectedError):
            storage.validate_image(png_bytes, "image/png")

    def test_declared_type_not_allowed(self, storage, png_bytes):
        with pytest.raises(ImageRejectedError):
            storage.validate_image(png_bytes, "application/pdf")

    def test_content_must_match_an_allowed_format(self, storage):
        with pytest.raises(ImageRejectedError):
            storage.validate_image(b"GIF89a....", "image/png")

    def test_extension_follows_content(self, storage, png_bytes):
        # Declared as JPEG, stored as what it really is
        assert storage.validate_image(png_bytes, "image/jpeg") == "png"


class TestReadUpload:

    def test_small_upload_read_whole(self, storage, png_bytes):
        assert storage.read_upload(io.BytesIO(png_bytes)) == png_bytes

    def test_stops_reading_past_the_limit(self, tmp_path):
        storage = LocalObjectStorage(root=str(tmp_path), max_size=100)
        stream = io.BytesIO(b"x" * 10_000)

        with pytest.raises(ImageRejectedError):
            storage.read_upload(stream)
        assert stream.tell() == 101

    def test_exactly_at_the_limit(self, tmp_path):
        storage = LocalObjectStorage(root=str(tmp_path), max_size=100)

        assert len(storage.read_upload(io.BytesIO(b"x" * 100))) == 100


class TestUploadAndDelete:

    def test_upload_writes_under_bucket(self, storage, png_bytes):
        url = storage.upload_image(png_bytes, "photo.png", "image/png", "MAT/001")

        assert url.startswith("/storage/inventory-images/items/MAT_001-")
        path = storage.bucket_dir / url[len("/storage/inventory-images/"):]
        assert path.read_bytes() == png_bytes

    def test_delete(self, storage, png_bytes):
        url = storage.upload_image(png_bytes, "photo.png", "image/png", "MAT-001")

        assert storage.delete_image(url) is True
        assert storage.delete_image(url) is False

    def test_foreign_urls_ignored(self, storage):
        assert storage.delete_image("https://cdn.example.com/photo.png") is False
        assert storage.delete_image("/storage/inventory-images/../secret.txt") is False
        assert storage.delete_image(None) is False

    def test_public_url(self, storage):
        assert storage.get_public_url("items/a.png") == "/storage/inventory-images/items/a.png"
