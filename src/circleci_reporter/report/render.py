"""JUnit XML rendering.

Output shape::

    <?xml version="1.0" encoding="UTF-8"?>
    <testsuite name="playwright" timestamp="..." time="..." tests="N" failures="N" skipped="N">
      <testcase name="..." file="..." time="..." classname="...">
        <failure message="..." type="..."><![CDATA[...]]></failure>
      </testcase>
    </testsuite>

Rendering is deterministic: the same context always yields the same text,
which keeps the content hash stable.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from xml.dom import minidom

from circleci_reporter.report.models import ReportContext, ReportSummary, TestRecord
from circleci_reporter.report.sanitize import remove_invalid_characters

SUITE_NAME = "playwright"
_CDATA_END = "]]>"


def format_seconds(millis: float | None) -> str:
    """Milliseconds to seconds with exactly 4 decimals. Missing/invalid -> 0."""
    try:
        value = float(millis) if millis is not None else 0.0
    except (TypeError, ValueError):
        value = 0.0
    if not math.isfinite(value) or value < 0:
        value = 0.0
    return f"{value / 1000:.4f}"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 to whole seconds in UTC, no zone suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S")


def _set_attributes(element: minidom.Element, attributes: dict[str, str]) -> None:
    for key, value in attributes.items():
        element.setAttribute(key, remove_invalid_characters(value))


def _body_node(doc: minidom.Document, text: str) -> minidom.Text:
    """CDATA section, or an escaped text node when the text contains ']]>'."""
    if _CDATA_END in text:
        return doc.createTextNode(text)
    return doc.createCDATASection(text)


def _testcase_element(doc: minidom.Document, record: TestRecord) -> minidom.Element:
    testcase = doc.createElement("testcase")
    _set_attributes(
        testcase,
        {
            "name": record.name,
            "file": record.file,
            "time": record.time,
            "classname": record.classname,
        },
    )
    if record.failure is not None:
        failure = doc.createElement("failure")
        _set_attributes(
            failure,
            {"message": record.failure.message, "type": record.failure.type},
        )
        failure.appendChild(_body_node(doc, remove_invalid_characters(record.failure.body)))
        testcase.appendChild(failure)
    return testcase


def render_xml(ctx: ReportContext, summary: ReportSummary) -> str:
    """Render the record table and run metadata as a pretty-printed UTF-8 document."""
    doc = minidom.Document()
    suite = doc.createElement("testsuite")
    _set_attributes(
        suite,
        {
            "name": SUITE_NAME,
            "timestamp": format_timestamp(ctx.metadata.start_time),
            "time": format_seconds(ctx.metadata.duration_millis),
            "tests": str(summary.tests),
            "failures": str(summary.failures),
            "skipped": str(summary.skipped),
        },
    )
    doc.appendChild(suite)

    for record in ctx.records.values():
        suite.appendChild(_testcase_element(doc, record))

    return doc.toprettyxml(indent="  ", encoding="UTF-8").decode("utf-8")
