"""Resend e-mail client for issue reports."""

from __future__ import annotations

import logging
import time

import httpx

from newbridge.config import settings

logger = logging.getLogger(__name__)

_MAX_RETRIES = 2
_RETRY_STATUSES = {429, 500, 502, 503, 504}
_BASE_BACKOFF_SECONDS = 1.0

_NOT_PROVIDED = "Not provided"


def format_subject(report: dict) -> str:
    subject = f"Resource Report: {report['issue_type']}"
    if report.get("resource_name"):
        subject += f" - {report['resource_name']}"
    return subject


def format_body(report: dict) -> str:
    """Plain-text body listing the report for an admin to act on."""
    lines = [
        "New Resource Issue Report",
        "",
        f"Resource: {report.get('resource_name') or _NOT_PROVIDED}",
        f"Address: {report.get('resource_address') or _NOT_PROVIDED}",
        f"Resource ID: {report['resource_id']}",
        "",
        f"Issue Type: {report['issue_type']}",
        "",
        "Details:",
        report["description"],
        "",
        f"Reporter Email: {report.get('reporter_email') or _NOT_PROVIDED}",
        f"Submitted: {report.get('timestamp') or _NOT_PROVIDED}",
        "",
        "---",
        "Action needed: Please verify this information and update the resource listing if needed.",
    ]
    return "\n".join(lines)


class ResendNotifier:
    """Sends issue reports through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        sender: str | None = None,
        recipient: str | None = None,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.base_url = base_url or settings.resend_base_url
        self.sender = sender or settings.report_email_from
        self.recipient = recipient or settings.report_email_to
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(base_url=self.base_url, timeout=15.0)
        return self._client

    def send_report(self, report: dict) -> str | None:
        """Send one report. Returns the Resend message id, or None when skipped."""
        if not self.is_configured:
            logger.warning("RESEND_API_KEY is not set; skipping report email")
            return None

        response = self._post_with_retry(
            "/emails",
            json={
                "from": self.sender,
                "to": [self.recipient],
                "subject": format_subject(report),
                "text": format_body(report),
            },
        )
        message_id = response.json().get("id")
        logger.info("Report email sent for resource %s (id=%s)", report["resource_id"], message_id)
        return message_id

    def _post_with_retry(self, path: str, **kwargs) -> httpx.Response:
        client = self._get_client()
        headers = {"Authorization": f"Bearer {self.api_key}"}

        for attempt in range(_MAX_RETRIES + 1):
            try:
                response = client.post(path, headers=headers, **kwargs)
            except httpx.RequestError as exc:
                if attempt >= _MAX_RETRIES:
                    raise
                delay = _BASE_BACKOFF_SECONDS * (2 ** attempt)
                logger.warning("Resend request error: %s, retrying in %.1fs", exc, delay)
                time.sleep(delay)
                continue

            if response.status_code not in _RETRY_STATUSES or attempt >= _MAX_RETRIES:
                response.raise_for_status()
                return response

            delay = _BASE_BACKOFF_SECONDS * (2 ** attempt)
            logger.warning(
                "Resend returned %d, retrying in %.1fs", response.status_code, delay
            )
            time.sleep(delay)

        raise RuntimeError("unreachable")
