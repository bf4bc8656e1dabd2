"""
Webhook server setup.
"""

from aiohttp import web

from sitebuild.core.logging import get_logger
from sitebuild.models.target import BranchTarget
from sitebuild.services.builder import SiteBuilder
from sitebuild.webhooks.github import BUILDER_KEY, SECRET_KEY, TARGETS_KEY, handle_push

logger = get_logger(__name__)


def create_webhook_app(
    builder: SiteBuilder,
    targets: tuple[BranchTarget, ...],
    secret: str | None,
) -> web.Application:
    """Create the aiohttp application serving ``POST /webhook``."""
    app = web.Application()
    app[BUILDER_KEY] = builder
    app[TARGETS_KEY] = targets
    app[SECRET_KEY] = secret or ""
    app.router.add_post("/webhook", handle_push)
    return app


async def start_webhook_server(app: web.Application, host: str = "0.0.0.0", port: int = 8080) -> web.AppRunner:
    """
    Start the webhook server.

    Args:
        app: Application from create_webhook_app
        host: Host to bind to
        port: Port to bind to

    Returns:
        The runner, to be cleaned up on shutdown
    """
    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Starting listener: {host}:{port}")
    return runner
