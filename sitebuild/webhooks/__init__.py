# Webhooks - GitHub push endpoint
from .server import create_webhook_app, start_webhook_server

__all__ = ["create_webhook_app", "start_webhook_server"]
