"""
Application factory and main entry point.
"""

import sys
import asyncio
from functools import partial

from pydantic import ValidationError

from sitebuild.core.config import Settings
from sitebuild.core.exceptions import InvalidCronExpressionError
from sitebuild.core.logging import setup_logging, set_log_level, get_logger
from sitebuild.models.build import TriggerSource
from sitebuild.scheduler.cron import CronScheduler
from sitebuild.services.builder import SiteBuilder
from sitebuild.services.dispatch import pending_builds
from sitebuild.webhooks.server import create_webhook_app, start_webhook_server

# Initialize logging
setup_logging()
logger = get_logger(__name__)


def load_settings() -> Settings:
    """Load settings from the environment, exiting on invalid configuration."""
    try:
        settings = Settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    set_log_level(settings.log_level)
    logger.info(f"REPO_URL: {settings.repo_url}")
    logger.info(f"LIVE_BRANCH: {settings.live_branch}")
    logger.info(f"BETA_BRANCH: {settings.beta_branch}")
    if not settings.github_sec_token:
        logger.warning("GITHUB_SEC_TOKEN not set, webhook signatures will not be verified!")
    if not settings.mail_configured:
        logger.info("Mail not configured, build results are only logged.")
    return settings


def create_scheduler(settings: Settings, builder: SiteBuilder) -> CronScheduler:
    """Register a scheduled build for every target with a cron expression."""
    scheduler = CronScheduler()
    for target in settings.targets:
        if not target.schedule:
            logger.info(f"No schedule for {target.name} build")
            continue
        try:
            scheduler.add_job(
                target.schedule,
                partial(builder.attempt_build, TriggerSource.SCHEDULED, target),
                name=f"{target.name} build",
            )
        except InvalidCronExpressionError as e:
            logger.error(f"Error adding cron job for {target.name} build: {e}")
    return scheduler


async def main() -> None:
    """Main application entry point."""
    logger.info("Starting site builder...")

    settings = load_settings()
    builder = SiteBuilder.from_settings(settings)

    scheduler = create_scheduler(settings, builder)
    scheduler.start()

    app = create_webhook_app(builder, settings.targets, settings.github_sec_token)
    runner = await start_webhook_server(app, settings.listen_host, settings.listen_port)

    # Keep running until cancelled
    stop_signal = asyncio.Event()
    try:
        await stop_signal.wait()
    except asyncio.CancelledError:
        pass
    finally:
        await scheduler.stop()
        for task in pending_builds():
            task.cancel()
        await runner.cleanup()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
