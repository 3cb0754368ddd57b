"""Flask app that serves a generated systrace document."""

from flask import Flask, Response, jsonify


def create_viewer_app(html: str) -> Flask:
    app = Flask(__name__)

    @app.route("/")
    def index():
        return Response(html, mimetype="text/html")

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    return app


def run_viewer(app: Flask, host: str, port: int):
    app.run(host=host, port=port, use_reloader=False)
