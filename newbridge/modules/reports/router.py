"""Issue report API router: anonymous, rate-limited per client address."""

import logging

from fastapi import APIRouter, Request
from kombu.exceptions import OperationalError

from newbridge.config import settings
from newbridge.limiter import limiter
from newbridge.modules.reports.schemas import IssueReportCreate, IssueReportResponse
from newbridge.modules.reports.tasks import send_issue_report

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


@router.post("/report-issue", response_model=IssueReportResponse)
@limiter.limit(settings.report_issue_rate_limit)
async def report_issue(request: Request, body: IssueReportCreate):
    """Accept a problem report about a listed resource and queue the admin e-mail."""
    report = body.model_dump()
    logger.info(
        "Issue report received for resource %s: %s", body.resource_id, body.issue_type
    )
    try:
        send_issue_report.delay(report)
    except OperationalError:
        logger.exception("Could not queue issue report for resource %s", body.resource_id)
    return IssueReportResponse()
