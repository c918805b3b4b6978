# web/server.py
import json
import time
from typing import Callable

from flask import Flask, Response, jsonify, render_template, request

from walk_buddy.controller import StrobeController
from walk_buddy.settings_store import SettingsStore

STREAM_POLL_SEC = 0.1
STREAM_KEEPALIVE_SEC = 15.0


def _json_object() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def create_app(
    controller: StrobeController,
    settings: SettingsStore,
    logger: Callable[[str], None] = print,
) -> Flask:
    app = Flask(__name__, template_folder="templates", static_folder="static")

    @app.route("/")
    def panic_screen():
        return render_template("panic.html", state=controller.snapshot())

    @app.route("/settings")
    def settings_screen():
        return render_template("settings.html", contact=settings.get_contact())

    @app.route("/api/state")
    def api_state():
        return jsonify(controller.snapshot())

    @app.route("/api/stream")
    def api_stream():
        def gen():
            last = None
            last_sent_at = time.time()
            while True:
                snap = controller.snapshot()
                if snap != last:
                    last = snap
                    last_sent_at = time.time()
                    yield f"event: state\ndata: {json.dumps(snap)}\n\n"
                elif time.time() - last_sent_at >= STREAM_KEEPALIVE_SEC:
                    last_sent_at = time.time()
                    yield ":keepalive\n\n"
                time.sleep(STREAM_POLL_SEC)

        return Response(gen(), mimetype="text/event-stream")

    @app.route("/api/flash/toggle", methods=["POST"])
    def api_toggle_flash():
        return jsonify({"is_flashing": controller.toggle_flash()})

    @app.route("/api/flash/speed", methods=["POST"])
    def api_flash_speed():
        body = _json_object()
        seconds = body.get("seconds")
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return jsonify({"error": "missing number 'seconds'"}), 400
        return jsonify({"flash_speed": controller.set_flash_speed(seconds)})

    @app.route("/api/display_flash", methods=["POST"])
    def api_display_flash():
        body = _json_object()
        on = body.get("on")
        if not isinstance(on, bool):
            return jsonify({"error": "missing boolean 'on'"}), 400
        controller.set_display_flash_enabled(on)
        return jsonify({"display_flash_enabled": on})

    @app.route("/api/panic", methods=["POST"])
    def api_panic():
        return jsonify({"panic_active": controller.toggle_panic_mode()})

    @app.route("/api/settings/contact", methods=["GET"])
    def api_get_contact():
        return jsonify({"contact": settings.get_contact()})

    @app.route("/api/settings/contact", methods=["POST"])
    def api_set_contact():
        body = _json_object()
        contact = body.get("contact")
        if not isinstance(contact, str):
            return jsonify({"error": "missing string 'contact'"}), 400
        if not settings.set_contact(contact):
            logger("[WEB] Contact not saved")
            return jsonify({"error": "contact not saved", "contact": settings.get_contact()}), 400
        return jsonify({"contact": settings.get_contact()})

    return app
