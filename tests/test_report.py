"""Unit tests for the run summary report and SES delivery."""

from __future__ import annotations

import asyncio

from datetime import datetime, timezone
from typing import Any, Dict, List

from apps.rankings_ingestion.config import NotificationConfig
from apps.rankings_ingestion.models import ScrapeOutcome
from apps.rankings_ingestion.orchestrate.report import (
    FAILURE_SUBJECT,
    SUCCESS_SUBJECT,
    SesNotifier,
    build_report,
)

STARTED = datetime(2024, 10, 4, 14, 0, tzinfo=timezone.utc)
FINISHED = datetime(2024, 10, 4, 14, 7, tzinfo=timezone.utc)


class RecordingSesClient:
    def __init__(self) -> None:
        self.requests: List[Dict[str, Any]] = []

    def send_email(self, **kwargs: Any) -> Dict[str, Any]:
        self.requests.append(kwargs)
        return {"MessageId": "test"}


def make_config(enabled: bool = True, sender: str = "scraper@example.com") -> NotificationConfig:
    config = NotificationConfig()
    config.enabled = enabled
    config.sender = sender
    return config


def test_success_report_has_times_and_success_message() -> None:
    subject, body = build_report(True, STARTED, FINISHED)

    assert subject == SUCCESS_SUBJECT
    assert "Start Time: 2024-10-04T14:00:00+00:00" in body
    assert "End Time: 2024-10-04T14:07:00+00:00" in body
    assert "All stats successfully scraped" in body


def test_failure_report_lists_each_failed_statistic() -> None:
    failures = [
        ScrapeOutcome("Total Offense", False, "Failed to scrape data for Total Offense after 3 attempts"),
        ScrapeOutcome("Net Punting", False, "timeout"),
    ]

    subject, body = build_report(False, STARTED, FINISHED, failures)

    assert subject == FAILURE_SUBJECT
    assert "Failed stats:" in body
    assert "Total Offense - Failed to scrape data for Total Offense after 3 attempts" in body
    assert "Net Punting - timeout" in body


def test_overall_error_report_escapes_markup() -> None:
    _, body = build_report(False, STARTED, FINISHED, overall_error=RuntimeError("<pool> closed"))

    assert "Overall error: &lt;pool&gt; closed" in body


def test_ses_notifier_sends_html_email() -> None:
    client = RecordingSesClient()
    notifier = SesNotifier(make_config(), client=client)

    asyncio.run(notifier.send("Scrape Successful", "<h2>ok</h2>", ["a@example.com", "b@example.com"]))

    assert client.requests == [{
        "Source": "scraper@example.com",
        "Destination": {"ToAddresses": ["a@example.com", "b@example.com"]},
        "Message": {
            "Subject": {"Data": "Scrape Successful"},
            "Body": {"Html": {"Data": "<h2>ok</h2>"}},
        },
    }]


def test_ses_notifier_skips_when_disabled_or_unaddressed() -> None:
    client = RecordingSesClient()

    asyncio.run(SesNotifier(make_config(enabled=False), client=client).send("s", "b", ["a@example.com"]))
    asyncio.run(SesNotifier(make_config(), client=client).send("s", "b", []))

    assert client.requests == []
