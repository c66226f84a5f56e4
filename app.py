import os
import uuid
import threading
from collections import OrderedDict
import traceback
from datetime import datetime

from flask import (
    Flask, Response, abort, jsonify, redirect, render_template, request, session, url_for,
)
from dotenv import load_dotenv

import generator
from encoder import UploadedImage
from errors import ImageReadError
from generation_state import FormSession, Status
from site_config import SITE_CONFIG, STATE_MESSAGES

load_dotenv()

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024  # 16 MB
app.config["ERROR_LOG"] = os.environ.get("ERROR_LOG", "last_error.log")
app.secret_key = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)
# Oldest untouched form sessions are dropped beyond this many
app.config["MAX_FORM_SESSIONS"] = int(os.environ.get("MAX_FORM_SESSIONS", "200"))

# Only static file serving bypasses the API-key check
_NO_KEY_ALLOWED = {"static", "robots_txt"}

# One FormSession per browser, keyed by the id stored in the session cookie,
# most recently used last
_FORMS: "OrderedDict[str, FormSession]" = OrderedDict()
_FORMS_LOCK = threading.Lock()


# ── Inject site config into every template automatically ──────────────────────
@app.context_processor
def inject_globals():
    return {"site": SITE_CONFIG, "state_messages": STATE_MESSAGES}


@app.before_request
def require_api_key():
    if request.endpoint in _NO_KEY_ALLOWED:
        return
    if not (os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")):
        return render_template("setup.html"), 503


@app.errorhandler(413)
def too_large(_exc):
    return render_template("error.html", message="The screenshot is larger than 16 MB."), 413


# ── Helpers ───────────────────────────────────────────────────────────────────

def _log_error(context: str, exc: BaseException) -> None:
    """Write the last error with timestamp to the error log (no user data)."""
    with open(app.config["ERROR_LOG"], "w", encoding="utf-8") as f:
        f.write(f"[{datetime.now().isoformat(timespec='seconds')}] {context}\n\n")
        if exc.__traceback__:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=f)
        else:
            f.write(f"{type(exc).__name__}: {exc}\n")


def _current_form(create: bool = True) -> FormSession:
    """Return this browser's FormSession.

    Read-only routes pass create=False: a visitor without a registered
    session then gets a blank, unregistered FormSession instead of a new
    registry entry. The registry keeps at most MAX_FORM_SESSIONS entries,
    evicting the least recently used.
    """
    sid = session.get("sid")
    with _FORMS_LOCK:
        form = _FORMS.get(sid) if sid else None
        if form is not None:
            _FORMS.move_to_end(sid)
            return form
        if not create:
            return FormSession()
        if not sid:
            sid = session["sid"] = uuid.uuid4().hex
        form = _FORMS[sid] = FormSession()
        while len(_FORMS) > app.config["MAX_FORM_SESSIONS"]:
            _FORMS.popitem(last=False)
    return form


def _take_fields(form: FormSession) -> None:
    form.update_fields(url=request.form.get("url"), notes=request.form.get("notes"))


def _take_upload(form: FormSession) -> None:
    """Select the uploaded screenshot, if the request carries one."""
    file = request.files.get("image")
    if not file or not file.filename:
        return
    form.select_image(UploadedImage.from_upload(file, SITE_CONFIG["preprocessors"]))


def _image_error(e: ImageReadError):
    return render_template("error.html", message=str(e)), 400


# ── Routes ────────────────────────────────────────────────────────────────────

@app.route("/robots.txt")
def robots_txt():
    return Response("User-agent: *\nDisallow: /\n", mimetype="text/plain")


@app.route("/")
def index():
    form = _current_form(create=False)
    return render_template("index.html", form=form, state=form.state, Status=Status)


@app.route("/image", methods=["POST"])
def select_image():
    form = _current_form()
    _take_fields(form)
    if not request.files.get("image") or not request.files["image"].filename:
        return render_template("error.html", message="No file received."), 400
    try:
        _take_upload(form)
    except ImageReadError as e:
        return _image_error(e)
    return redirect(url_for("index"))


@app.route("/image/clear", methods=["POST"])
def clear_image():
    form = _current_form()
    _take_fields(form)
    form.clear_image()
    return redirect(url_for("index"))


@app.route("/generate", methods=["POST"])
def generate():
    form = _current_form()
    _take_fields(form)
    try:
        _take_upload(form)
    except ImageReadError as e:
        return _image_error(e)

    try:
        submitted = form.submit(generator.generate)
    except Exception as e:
        _log_error("generation", e)
        raise

    if submitted and form.failure is not None:
        _log_error("generation", form.failure)
    if form.state.status is Status.COMPLETED:
        return redirect(url_for("index", _anchor="result"))
    return redirect(url_for("index"))


@app.route("/state")
def state():
    return jsonify(_current_form(create=False).state.as_dict())


@app.route("/script")
def download_script():
    form = _current_form(create=False)
    if form.state.status is not Status.COMPLETED or form.result is None:
        abort(404)
    filename = SITE_CONFIG["script_filename"]
    return Response(
        form.result.script,
        mimetype="text/x-python",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


if __name__ == "__main__":
    print("Starting on http://localhost:5000")
    app.run(debug=True, port=5000)
