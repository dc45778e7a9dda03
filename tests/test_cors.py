from flask import Flask

from photosite.cors import install_cors


def _app():
    app = Flask(__name__)
    install_cors(app)

    @app.route("/ping", methods=["GET", "POST"])
    def ping():
        return "pong"

    return app


def test_get_carries_cors_headers():
    response = _app().test_client().get("/ping")
    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET,POST,PUT,DELETE,OPTIONS"
    assert response.headers["Access-Control-Expose-Headers"] == "Content-Length,Content-Type"


def test_preflight_is_answered_with_no_content():
    response = _app().test_client().options("/ping")
    assert response.status_code == 204
    assert response.data == b""
    assert (
        response.headers["Access-Control-Allow-Headers"]
        == "Content-Type,Authorization,X-Requested-With,Accept,Origin"
    )


def test_preflight_on_unknown_path_is_answered_too():
    response = _app().test_client().options("/nowhere")
    assert response.status_code == 204