"""Assembly of the HTTP application and its routes."""

from flask import Blueprint, Flask

from photosite.behavior_guard import BehaviorGuard
from photosite.cors import install_cors
from photosite.recovery import install_recovery
from photosite.request_logging import install_request_logging
from photosite.visitor_middleware import install_visitor

API_PREFIX = "/api/v1"


def create_app(logger, guard_config, health_handler, photo_handler, tag_handler, filter_handler):
    """The Flask application serving the versioned API."""
    app = Flask("photosite")

    install_cors(app)
    install_request_logging(app, logger)
    install_recovery(app, logger)
    install_visitor(app)

    routes = [
        ("/health", "health", health_handler.health),
        ("/photos", "list_photos", photo_handler.list_photos),
        ("/photos/<photo_uuid>", "photo_detail", photo_handler.get_photo_detail),
        ("/tags", "list_tags", tag_handler.list_tags),
        ("/filters", "get_filters", filter_handler.get_filters),
    ]
    for rule, endpoint, view in routes:
        app.add_url_rule(API_PREFIX + rule, endpoint=endpoint, view_func=view, methods=["GET"])

    behavior = Blueprint("behavior", __name__, url_prefix=f"{API_PREFIX}/photos/<photo_uuid>")
    behavior.before_request(BehaviorGuard(logger, guard_config))
    actions = [
        ("/view", "view", photo_handler.view_photo),
        ("/like", "like", photo_handler.like_photo),
        ("/unlike", "unlike", photo_handler.unlike_photo),
        ("/download", "download", photo_handler.download_photo),
    ]
    for rule, endpoint, view in actions:
        behavior.add_url_rule(rule, endpoint=endpoint, view_func=view, methods=["POST"])
    app.register_blueprint(behavior)

    return app