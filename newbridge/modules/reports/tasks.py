"""Celery tasks for issue report notifications."""

from __future__ import annotations

import logging

import httpx

from celery_app import celery
from newbridge.modules.reports.notifier import ResendNotifier

logger = logging.getLogger(__name__)


@celery.task(
    name="newbridge.modules.reports.tasks.send_issue_report",
    bind=True,
    max_retries=3,
)
def send_issue_report(self, report: dict) -> str | None:
    """E-mail an issue report to the directory admins."""
    try:
        return ResendNotifier().send_report(report)
    except httpx.HTTPError as exc:
        logger.exception("send_issue_report failed for resource %s", report.get("resource_id"))
        raise self.retry(exc=exc, countdown=60)
