"""
Run summary report and its delivery.

The orchestrator hands a subject and HTML body to a Notifier. Delivery is
fire-and-forget: a failed send is logged by the caller and never retried.
"""

from __future__ import annotations

import asyncio
import html
import logging

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence, Tuple

import boto3

from apps.rankings_ingestion.config import NotificationConfig, get_notification_config
from apps.rankings_ingestion.models import ScrapeOutcome

logger = logging.getLogger(__name__)

SUCCESS_SUBJECT = "Scrape Successful"
FAILURE_SUBJECT = "Scrape Failed"


class Notifier(Protocol):
    async def send(self, subject: str, html_body: str, recipients: Sequence[str]) -> None:
        """Deliver one report."""


def build_report(
    success: bool,
    started_at: datetime,
    finished_at: datetime,
    failures: Sequence[ScrapeOutcome] = (),
    overall_error: Optional[BaseException] = None,
) -> Tuple[str, str]:
    """
    Build the subject and HTML body of a run summary.

    Returns:
        (subject, html_body)
    """
    subject = SUCCESS_SUBJECT if success else FAILURE_SUBJECT

    if overall_error is not None:
        message = f"Overall error: {html.escape(str(overall_error))}"
    elif failures:
        lines = [
            f"{html.escape(failure.statistic)} - {html.escape(failure.error or 'Unknown error')}"
            for failure in failures
        ]
        message = "Failed stats:<br>" + "<br>".join(lines)
    else:
        message = "All stats successfully scraped"

    body = (
        f"<h2>{subject}</h2>\n"
        f"<p>Start Time: {started_at.isoformat()}</p>\n"
        f"<p>End Time: {finished_at.isoformat()}</p>\n"
        f"<p>{message}</p>\n"
    )
    return subject, body


class SesNotifier:
    """Sends reports as HTML email through Amazon SES."""

    def __init__(self, config: Optional[NotificationConfig] = None, client: Any = None) -> None:
        self.config = config or get_notification_config()
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.config.aws_region)
        return self._client

    async def send(self, subject: str, html_body: str, recipients: Sequence[str]) -> None:
        if not self.config.enabled:
            logger.info(f"Report email disabled, not sending {subject!r}")
            return
        if not self.config.sender or not recipients:
            logger.warning("REPORT_EMAIL_SENDER or recipients not configured, report not sent")
            return

        # boto3 calls block
        await asyncio.to_thread(
            self.client.send_email,
            Source=self.config.sender,
            Destination={"ToAddresses": list(recipients)},
            Message={
                "Subject": {"Data": subject},
                "Body": {"Html": {"Data": html_body}},
            },
        )
        logger.info(f"Sent report {subject!r} to {len(recipients)} recipient(s)")
