"""Flask application for the web QR fixer."""

import sys
import os
import logging
from io import BytesIO
from typing import Optional

from urllib.parse import urlparse

from flask import (
    Blueprint, Flask, current_app, render_template, request, jsonify, send_file, abort
)

# Add parent directory so we can import shared modules
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from models.fixer_config import FixerConfig, load_config
from export.png_export import ExportError
from utils.image_loader import ImageLoadError, load_image
from utils.logging_config import level_from_env, setup_logging
from web.state import AppState

logger = logging.getLogger("web.app")

ALLOWED_HOSTS = {"localhost", "127.0.0.1"}

bp = Blueprint("fixer", __name__)


def get_state() -> AppState:
    return current_app.extensions["qr_fixer"]


def _png_response(img, **kwargs):
    buf = BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return send_file(buf, mimetype="image/png", **kwargs)


def _no_image():
    return jsonify(error="No image loaded"), 409


@bp.before_app_request
def csrf_check():
    """Reject non-GET/HEAD/OPTIONS requests with a foreign Origin or Referer."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return
    origin = request.headers.get("Origin") or request.headers.get("Referer")
    if origin:
        host = urlparse(origin).hostname
        if host not in ALLOWED_HOSTS:
            return jsonify(error="Forbidden: cross-origin request"), 403


@bp.app_errorhandler(413)
def upload_too_large(e):
    limit = get_state().config.max_upload_mb
    return jsonify(error=f"File too large (max {limit} MB)"), 413


# ---------------------------------------------------------------------------
# Page route
# ---------------------------------------------------------------------------

@bp.route("/")
def index():
    return render_template("index.html", config=get_state().config)


@bp.route("/api/config")
def get_config():
    return jsonify(get_state().config.to_dict())


@bp.route("/api/state")
def get_session_state():
    state = get_state()
    with state.lock:
        return jsonify(state.session.snapshot())


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@bp.route("/api/upload", methods=["POST"])
def upload_image():
    if "file" not in request.files:
        return jsonify(error="No file provided"), 400
    f = request.files["file"]
    if not f.filename:
        return jsonify(error="Empty filename"), 400

    state = get_state()
    with state.lock:
        token = state.session.begin_upload()

    # Decode outside the lock; the token decides which upload lands
    try:
        img = load_image(f.stream, state.config.max_image_pixels)
    except ImageLoadError as e:
        with state.lock:
            state.session.fail_upload(token, str(e))
        return jsonify(error=str(e)), 400

    with state.lock:
        applied = state.session.complete_upload(token, img, f.filename)
        snapshot = state.session.snapshot()

    if not applied:
        return jsonify(error="Superseded by a newer upload", state=snapshot), 409
    return jsonify(ok=True, state=snapshot)


@bp.route("/api/original-image")
def original_image():
    state = get_state()
    with state.lock:
        img = state.session.image
    if img is None:
        abort(404)
    return _png_response(img)


# ---------------------------------------------------------------------------
# Scale controls
# ---------------------------------------------------------------------------

@bp.route("/api/scale", methods=["PUT"])
def update_scale():
    data = request.get_json(silent=True) or {}
    if "scale" not in data:
        return jsonify(error="Missing 'scale'"), 400

    state = get_state()
    with state.lock:
        if not state.session.has_image:
            return _no_image()
        try:
            state.session.set_scale(data["scale"])
        except ValueError as e:
            return jsonify(error=str(e)), 400
        return jsonify(ok=True, state=state.session.snapshot())


@bp.route("/api/reset", methods=["POST"])
def reset_scale():
    state = get_state()
    with state.lock:
        if not state.session.has_image:
            return _no_image()
        state.session.reset()
        return jsonify(ok=True, state=state.session.snapshot())


# ---------------------------------------------------------------------------
# Preview & export
# ---------------------------------------------------------------------------

@bp.route("/api/preview")
def preview():
    state = get_state()
    with state.lock:
        surface_img = state.session.surface.image
    if surface_img is None:
        abort(404)
    return _png_response(surface_img)


@bp.route("/api/download")
def download():
    state = get_state()
    with state.lock:
        try:
            data = state.session.export_png()
        except ExportError as e:
            return jsonify(error=str(e)), 409
    return send_file(
        BytesIO(data),
        mimetype="image/png",
        as_attachment=True,
        download_name=state.config.export_filename,
    )


@bp.route("/api/dismiss-error", methods=["POST"])
def dismiss_error():
    state = get_state()
    with state.lock:
        state.session.dismiss_error()
    return jsonify(ok=True)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(config: Optional[FixerConfig] = None) -> Flask:
    """Build the Flask app with a fresh, empty session."""
    config = config or load_config()
    app = Flask(__name__)
    app.secret_key = os.urandom(32)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_mb * 1024 * 1024
    app.extensions["qr_fixer"] = AppState(config)
    app.register_blueprint(bp)
    return app


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    setup_logging(level_from_env())
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    app = create_app()
    logger.info("QR Fixer Web - http://localhost:%d", port)
    app.run(host="127.0.0.1", port=port, debug=debug)


if __name__ == "__main__":
    main()
