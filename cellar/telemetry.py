"""
Error-telemetry tunnel.

Browsers post Sentry envelopes here instead of straight to the ingest host
(which ad blockers commonly drop). The envelope's first line is a JSON
header carrying the DSN; only allow-listed project ids are relayed.
"""

import json
import logging
from typing import Optional, Tuple
from urllib.parse import urlparse

import httpx

from cellar.app.settings import settings

logger = logging.getLogger(__name__)

ENVELOPE_CONTENT_TYPE = "application/x-sentry-envelope"


class UnknownProject(Exception):
    """The envelope targets a project outside the allow-list."""


def envelope_project_id(body: str) -> str:
    """
    Read the project id from an envelope's header line.

    Raises:
        ValueError: If the header is not JSON or carries no DSN.
    """
    header = json.loads(body.split("\n", 1)[0])
    dsn = header.get("dsn") if isinstance(header, dict) else None
    if not dsn:
        raise ValueError("envelope header has no dsn")
    return urlparse(dsn).path.strip("/")


def ingest_url(project_id: str) -> str:
    return f"https://{settings.SENTRY_HOST}/api/{project_id}/envelope/"


async def forward_envelope(
    body: str,
    sentry_auth: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[int, bytes]:
    """
    Relay an envelope to the ingest endpoint.

    Returns:
        (status_code, body) of the upstream response.

    Raises:
        UnknownProject: If the project id is not allow-listed.
    """
    project_id = envelope_project_id(body)
    if project_id not in settings.sentry_project_ids:
        raise UnknownProject(project_id)

    headers = {"Content-Type": ENVELOPE_CONTENT_TYPE}
    if sentry_auth:
        headers["X-Sentry-Auth"] = sentry_auth

    async with httpx.AsyncClient(transport=transport, timeout=10.0) as client:
        resp = await client.post(ingest_url(project_id), content=body.encode("utf-8"), headers=headers)

    if resp.status_code >= 400:
        logger.warning(f"Telemetry ingest answered {resp.status_code} for project {project_id}")
    return resp.status_code, resp.content
