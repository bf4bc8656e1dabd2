"""
GitHub webhook handler for push events.
"""

import hmac
import hashlib
import json
from urllib.parse import parse_qs

from aiohttp import web

from sitebuild.core.exceptions import SignatureInvalidError
from sitebuild.core.logging import get_logger
from sitebuild.models.build import TriggerSource
from sitebuild.models.target import BranchTarget, find_target
from sitebuild.services.builder import SiteBuilder
from sitebuild.services.dispatch import dispatch_build

logger = get_logger(__name__)

BUILDER_KEY = web.AppKey("builder", SiteBuilder)
TARGETS_KEY = web.AppKey("targets", tuple)
SECRET_KEY = web.AppKey("secret", str)

_SIGNATURE_HEADERS = (
    ("X-Hub-Signature-256", "sha256", hashlib.sha256),
    ("X-Hub-Signature", "sha1", hashlib.sha1),
)


def verify_signature(secret: str | None, body: bytes, headers) -> None:
    """
    Check the GitHub HMAC signature of a webhook body.

    Prefers ``X-Hub-Signature-256`` and falls back to the legacy sha1
    header. Nothing is checked when no secret is configured.

    Raises:
        SignatureInvalidError: If the signature is missing or wrong
    """
    if not secret:
        return

    for header, prefix, digest in _SIGNATURE_HEADERS:
        signature = headers.get(header)
        if not signature:
            continue
        expected = f"{prefix}=" + hmac.new(secret.encode(), body, digest).hexdigest()
        # bytes, since compare_digest rejects non-ASCII str
        if not hmac.compare_digest(signature.encode("utf-8", "surrogateescape"), expected.encode()):
            raise SignatureInvalidError(f"{header} does not match payload")
        return

    raise SignatureInvalidError("No signature")


def parse_payload(content_type: str, body: bytes) -> dict:
    """
    Decode a push payload sent as JSON or as a form with a ``payload`` field.

    Raises:
        ValueError: If the body is not a JSON object
    """
    if content_type == "application/x-www-form-urlencoded":
        form = parse_qs(body.decode("utf-8"))
        if "payload" not in form:
            raise ValueError("form body has no payload field")
        raw = form["payload"][0]
    else:
        raw = body.decode("utf-8")

    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("payload is not a JSON object")
    return payload


def branch_from_ref(ref: str) -> str:
    """``refs/heads/main`` -> ``main``."""
    return ref.rstrip("/").rsplit("/", 1)[-1]


async def handle_push(request: web.Request) -> web.Response:
    """Verify a GitHub push event and build the branch it names."""
    body = await request.read()

    try:
        verify_signature(request.app[SECRET_KEY], body, request.headers)
    except SignatureInvalidError as e:
        logger.warning(f"Bad signature: {e}")
        return web.Response(status=400, text="Invalid signature")

    logger.info(f"Event: {request.headers.get('X-GitHub-Event')}")
    logger.info(f"Delivery id: {request.headers.get('X-GitHub-Delivery')}")

    try:
        payload = parse_payload(request.content_type, body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Malformed webhook payload: {e}")
        return web.Response(status=400, text="Malformed payload")

    ref = payload.get("ref")
    if not isinstance(ref, str) or not ref:
        return web.Response(status=200, text="No ref")

    branch = branch_from_ref(ref)
    targets: tuple[BranchTarget, ...] = request.app[TARGETS_KEY]
    target = find_target(targets, branch)
    if target is None:
        logger.info(f"No branch to build: {branch}")
        return web.Response(status=200, text="Ignored branch")

    await dispatch_build(request.app[BUILDER_KEY], TriggerSource.WEBHOOK, target, target.webhook_dispatch)
    return web.Response(status=200, text="Processed")
