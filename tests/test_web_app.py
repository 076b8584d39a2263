"""Tests for the Flask routes of the web fixer."""

from io import BytesIO

from PIL import Image


def _png_size(resp):
    with Image.open(BytesIO(resp.data)) as img:
        return img.size


def test_index_shows_upload_only(client):
    resp = client.get("/")
    assert resp.status_code == 200
    page = resp.get_data(as_text=True)
    assert "Upload Compressed QR Code" in page
    assert 'step="0.05"' in page
    assert "1.50x" in page


def test_config(client):
    data = client.get("/api/config").get_json()
    assert data["min_scale"] == 0.5
    assert data["max_scale"] == 3.0
    assert data["export_filename"] == "fixed-qr-code.png"


def test_fresh_state(client):
    data = client.get("/api/state").get_json()
    assert data["has_image"] is False
    assert data["scale"] == 1.5


def test_controls_are_inert_without_image(client):
    assert client.put("/api/scale", json={"scale": 2.0}).status_code == 409
    assert client.post("/api/reset").status_code == 409
    assert client.get("/api/download").status_code == 409
    assert client.get("/api/preview").status_code == 404
    assert client.get("/api/original-image").status_code == 404
    assert client.get("/api/state").get_json()["scale"] == 1.5


def test_upload_and_scale_scenario(client, upload, sample_image):
    resp = upload(sample_image)
    assert resp.status_code == 200
    state = resp.get_json()["state"]
    assert (state["surface_width"], state["surface_height"]) == (150, 100)

    resp = client.put("/api/scale", json={"scale": 2.0})
    assert resp.get_json()["state"]["surface_width"] == 200
    assert _png_size(client.get("/api/preview")) == (200, 100)

    client.put("/api/scale", json={"scale": 0.5})
    assert _png_size(client.get("/api/preview")) == (50, 100)

    state = client.post("/api/reset").get_json()["state"]
    assert state["scale"] == 1.0
    assert state["readout"] == "1.00x"
    assert _png_size(client.get("/api/preview")) == (100, 100)


def test_original_image_is_unscaled(client, upload, make_image):
    upload(make_image(60, 30))
    client.put("/api/scale", json={"scale": 3.0})
    assert _png_size(client.get("/api/original-image")) == (60, 30)


def test_scale_is_clamped(client, upload, sample_image):
    upload(sample_image)
    state = client.put("/api/scale", json={"scale": 9}).get_json()["state"]
    assert state["scale"] == 3.0
    assert state["surface_width"] == 300


def test_bad_scale(client, upload, sample_image):
    upload(sample_image)
    assert client.put("/api/scale", json={"scale": "wide"}).status_code == 400
    assert client.put("/api/scale", json={}).status_code == 400
    assert client.get("/api/state").get_json()["scale"] == 1.5


def test_download(client, upload, sample_image):
    upload(sample_image)
    client.put("/api/scale", json={"scale": 1.25})

    resp = client.get("/api/download")

    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert "attachment" in resp.headers["Content-Disposition"]
    assert "fixed-qr-code.png" in resp.headers["Content-Disposition"]
    assert _png_size(resp) == (125, 100)


def test_upload_without_file(client):
    resp = client.post("/api/upload")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No file provided"


def test_corrupt_upload_reports_error_and_keeps_image(client, upload, sample_image):
    upload(sample_image)
    client.put("/api/scale", json={"scale": 2.0})

    resp = client.post(
        "/api/upload",
        data={"file": (BytesIO(b"not an image"), "notes.txt")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"]
    state = client.get("/api/state").get_json()
    assert state["has_image"] is True
    assert state["surface_width"] == 200
    assert state["error"]

    client.post("/api/dismiss-error")
    assert client.get("/api/state").get_json()["error"] is None


def test_new_upload_replaces_previous(client, upload, make_image):
    upload(make_image(100, 100), "first.png")
    state = upload(make_image(40, 80), "second.png").get_json()["state"]
    assert state["filename"] == "second.png"
    assert (state["surface_width"], state["surface_height"]) == (60, 80)


def test_superseded_upload_is_rejected(app, client, png_bytes, make_image):
    session = app.extensions["qr_fixer"].session

    # Simulate a newer upload starting while this request is decoding
    original_complete = session.complete_upload

    def complete_after_newer_upload(token, image, filename=""):
        session.begin_upload()
        return original_complete(token, image, filename)

    session.complete_upload = complete_after_newer_upload
    resp = client.post(
        "/api/upload",
        data={"file": (BytesIO(png_bytes(make_image(20, 20))), "slow.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 409
    assert session.image is None


def test_cross_origin_post_is_rejected(client):
    resp = client.post("/api/reset", headers={"Origin": "http://evil.example"})
    assert resp.status_code == 403


def test_each_app_starts_empty(app, upload, sample_image):
    from web.app import create_app

    upload(sample_image)
    other = create_app(app.extensions["qr_fixer"].config).test_client()
    assert other.get("/api/state").get_json()["has_image"] is False


def test_oversized_upload_returns_json_413():
    from models.fixer_config import FixerConfig
    from web.app import create_app

    client = create_app(FixerConfig(max_upload_mb=1)).test_client()
    resp = client.post(
        "/api/upload",
        data={"file": (BytesIO(b"\0" * (2 * 1024 * 1024)), "huge.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 413
    assert resp.get_json() == {"error": "File too large (max 1 MB)"}
    assert client.get("/api/state").get_json()["has_image"] is False


def test_module_logger_sits_under_the_web_package_logger():
    from utils.logging_config import PACKAGE_LOGGERS
    from web import app as web_app

    assert web_app.logger.name == "web.app"
    assert web_app.logger.name.split(".")[0] in PACKAGE_LOGGERS
