"""Command that starts the photo site API server."""

import argparse

from photosite import config
from photosite.behavior_guard import BehaviorGuardConfig
from photosite.behavior_service import BehaviorService
from photosite.db import connect_postgres
from photosite.filter_repository import FilterRepository
from photosite.filter_service import FilterService
from photosite.handlers import FilterHandler, HealthHandler, TagHandler
from photosite.photo_handler import PhotoHandler
from photosite.photo_repository import PhotoRepository
from photosite.photo_service import PhotoService
from photosite.presign import PresignDownloadURLSigner
from photosite.request_logging import new_logger
from photosite.router import create_app
from photosite.server import serve, server_settings
from photosite.tag_repository import TagRepository
from photosite.tag_service import TagService


def build_app(cfg, engine, signer, logger):
    """Wire repositories, services and handlers into the application."""
    photo_repo = PhotoRepository(engine)
    tag_repo = TagRepository(engine)
    filter_repo = FilterRepository(engine)

    photo_service = PhotoService(photo_repo)
    behavior_service = BehaviorService(photo_repo, signer)
    tag_service = TagService(tag_repo)
    filter_service = FilterService(filter_repo)

    behavior = cfg.security.behavior
    guard_config = BehaviorGuardConfig(
        enabled=behavior.enabled,
        window_seconds=behavior.window_seconds,
        ip_limit_per_window=behavior.ip_limit_per_window,
        suspicious_ip_limit_per_window=behavior.suspicious_ip_limit_per_window,
    )
    return create_app(
        logger,
        guard_config,
        HealthHandler(cfg.app.name),
        PhotoHandler(photo_service, behavior_service),
        TagHandler(tag_service),
        FilterHandler(filter_service),
    )


def main(argv=None):
    """Load configuration, connect to the database and serve the API."""
    parser = argparse.ArgumentParser(
        prog="photosite",
        description="Serve the photo site API. Settings come from configs/config.<APP_ENV>.yaml.",
    )
    parser.parse_args(argv)

    cfg = config.load()
    logger = new_logger(cfg.log.level)

    try:
        engine = connect_postgres(cfg)
    except ConnectionError as exc:
        logger.critical("failed to initialize postgres", extra={"fields": {"error": str(exc)}})
        return 1

    try:
        try:
            signer = PresignDownloadURLSigner.from_config(cfg.oss)
        except ValueError as exc:
            logger.critical("failed to initialize oss signer", extra={"fields": {"error": str(exc)}})
            return 1

        app = build_app(cfg, engine, signer, logger)
        settings = server_settings(cfg)
        logger.info(
            "server starting",
            extra={
                "fields": {
                    "name": cfg.app.name,
                    "env": cfg.app.env,
                    "address": settings.address,
                }
            },
        )
        try:
            serve(settings, app)
        except KeyboardInterrupt:
            pass
        except OSError as exc:
            logger.critical("server exited unexpectedly", extra={"fields": {"error": str(exc)}})
            return 1
        return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    raise SystemExit(main())