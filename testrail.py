import re
import traceback
from dataclasses import dataclass
from typing import Optional

import httpx

from logging_helper import log_status

PASSED_STATUS_ID = 1
FAILED_STATUS_ID = 5

PASSED_COMMENT = "Test passed via automation framework"
LOG_DELIMITER = "----- Test log -----"

CASE_ID_PATTERN = re.compile(r"C(\d+)")


def extract_case_id(title: str) -> Optional[int]:
    """
    "C45 - Successful Authentication" -> 45, "should return token" -> None.

    Tests without an embedded case id are simply not reported.
    """
    match = CASE_ID_PATTERN.search(title or "")
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class FailureSummary:
    title: str
    message: str
    location: str = "N/A"

    @classmethod
    def from_exception(cls, title: str, exc: BaseException, prefer_file: Optional[str] = None) -> "FailureSummary":
        """
        Location is the innermost frame, or the innermost frame inside
        prefer_file (the test module) when one exists, so hamcrest
        internals are skipped.
        """
        message = str(exc).strip() or type(exc).__name__
        frames = traceback.extract_tb(exc.__traceback__)
        if prefer_file is not None:
            frames = [f for f in frames if f.filename == prefer_file] or frames
        if frames:
            frame = frames[-1]
            location = f"{frame.filename}:{frame.lineno} in {frame.name}"
        else:
            location = "N/A"
        return cls(title=title, message=message, location=location)


def format_failure_comment(summary: FailureSummary, logs: str = "") -> str:
    comment = (
        "Test failed\n\n"
        f"Test name:\n{summary.title}\n\n"
        f"Error:\n{summary.message}\n\n"
        f"Location:\n{summary.location}"
    )
    if logs:
        comment = f"{comment}\n\n{LOG_DELIMITER}\n{logs}"
    return comment


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    case_id: int
    passed: bool
    comment: str

    @property
    def status_id(self) -> int:
        return PASSED_STATUS_ID if self.passed else FAILED_STATUS_ID


def build_result(title: str, failure: Optional[FailureSummary], logs: str = "") -> Optional[TestResult]:
    case_id = extract_case_id(title)
    if case_id is None:
        return None
    if failure is None:
        return TestResult(case_id=case_id, passed=True, comment=PASSED_COMMENT)
    return TestResult(case_id=case_id, passed=False, comment=format_failure_comment(failure, logs))


class TestRailClient:
    """Thin synchronous client for the TestRail v2 API."""
    __test__ = False

    def __init__(self, base_url: str, email: str, api_key: str, *, transport=None, timeout: float = 10):
        self.api_url = f"{base_url.rstrip('/')}/index.php?/api/v2/"
        # TestRail instances behind self-signed certs are common.
        self.client = httpx.Client(auth=(email, api_key), verify=False, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport=None) -> "TestRailClient":
        return cls(
            settings.testrail_base_url,
            settings.testrail_email,
            settings.testrail_api_key,
            transport=transport,
            timeout=settings.request_timeout,
        )

    def add_result_for_case(self, run_id: int, case_id: int, status_id: int, comment: str = "") -> httpx.Response:
        response = self.client.post(
            f"{self.api_url}add_result_for_case/{run_id}/{case_id}",
            json={"status_id": status_id, "comment": comment},
        )
        response.raise_for_status()
        return response

    def close(self) -> None:
        self.client.close()


def report_result(client: TestRailClient, run_id: int, case_id: int, passed: bool, comment: str = "") -> bool:
    """
    Send one result. A failed call is logged and reported as False; it must
    never change the outcome of the test it describes.
    """
    status_id = PASSED_STATUS_ID if passed else FAILED_STATUS_ID
    try:
        client.add_result_for_case(run_id, case_id, status_id, comment)
    except httpx.HTTPError as exc:
        log_status("error", f"TestRail report for C{case_id} failed: ", repr(exc))
        return False
    log_status("good", f"Reported C{case_id} to TestRail run {run_id} (status_id={status_id})")
    return True
