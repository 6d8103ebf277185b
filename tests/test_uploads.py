import io
import os

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.config import settings
from app.errors import InvalidArgument
from app.uploads import stored_image


def make_upload(filename, data, content_type):
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_no_upload_yields_none(upload_dir):
    with stored_image(None) as image:
        assert image is None

    assert not upload_dir.exists()


def test_jpeg_is_stored_with_timestamp_name(upload_dir):
    upload = make_upload("holiday.JPG", b"jpeg-bytes", "image/jpeg")

    with stored_image(upload) as image:
        assert image.public_path == f"/uploads/{image.filename}"
        assert image.filename.endswith(".JPG")
        assert image.size == len(b"jpeg-bytes")

    assert (upload_dir / image.filename).read_bytes() == b"jpeg-bytes"


def test_same_millisecond_uploads_do_not_collide(upload_dir, monkeypatch):
    monkeypatch.setattr("app.uploads.time.time", lambda: 1700000000.0)

    with stored_image(make_upload("a.png", b"a", "image/png")) as first:
        pass
    with stored_image(make_upload("b.png", b"b", "image/png")) as second:
        pass

    assert first.filename == "1700000000000.png"
    assert second.filename == "1700000000001.png"


def test_failure_inside_block_removes_file(upload_dir):
    upload = make_upload("photo.png", b"png", "image/png")

    with pytest.raises(RuntimeError):
        with stored_image(upload) as image:
            assert os.path.exists(image.path)
            raise RuntimeError("later step failed")

    assert not os.path.exists(image.path)


def test_rejects_other_types():
    upload = make_upload("anim.gif", b"gif", "image/gif")

    with pytest.raises(InvalidArgument) as exc:
        with stored_image(upload):
            pass

    assert exc.value.status_code == 400


def test_rejects_files_over_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_IMAGE_SIZE", 4)
    upload = make_upload("big.png", b"12345", "image/png")

    with pytest.raises(InvalidArgument):
        with stored_image(upload):
            pass


def test_file_at_limit_is_accepted(monkeypatch, upload_dir):
    monkeypatch.setattr(settings, "MAX_IMAGE_SIZE", 4)

    with stored_image(make_upload("ok.png", b"1234", "image/png")) as image:
        assert image.size == 4
