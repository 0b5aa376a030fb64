"""Falcon ASGI application."""

import logging

import falcon
import falcon.asgi
from falcon.asgi import App

from readflow.interfaces.api.middleware.cors import CORSMiddleware
from readflow.interfaces.api.resources.analyses import AnalysesResource, AnalysesStreamResource
from readflow.interfaces.api.resources.formats import FormatsResource
from readflow.interfaces.api.resources.health import HealthResource

logger = logging.getLogger(__name__)


async def log_exception(req, resp, ex, params):
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def create_app(
    analyses_resource: AnalysesResource,
    analyses_stream_resource: AnalysesStreamResource,
    formats_resource: FormatsResource,
    health_resource: HealthResource,
    cors_origins: list[str] | None = None,
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=[CORSMiddleware(cors_origins or [])])
    app.add_error_handler(Exception, log_exception)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/formats", formats_resource)
    app.add_route("/v1/analyses", analyses_resource)
    app.add_route("/v1/analyses/stream", analyses_stream_resource)
    return app
