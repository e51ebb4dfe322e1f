import httpx
import pytest
import pytest_asyncio

from api_helpers import RequestGateway
from auth_api import AuthClient
from booking_api import BookingClient
from config import load_settings
from health_api import HealthClient
from logging_helper import TestLogger, log_status
from testrail import FailureSummary, TestRailClient, build_result, report_result

SETTINGS_KEY = pytest.StashKey()
FAILURE_KEY = pytest.StashKey()
SKIPPED_KEY = pytest.StashKey()

MOCK_BASE_URL = "http://booker.test"


# -----------------------------
# Session setup
# -----------------------------
def pytest_configure(config):
    config.stash[SETTINGS_KEY] = load_settings()


def pytest_collection_modifyitems(config, items):
    if config.stash[SETTINGS_KEY].run_live:
        return
    skip_live = pytest.mark.skip(reason="live API tests disabled (set RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()

    if report.skipped:
        item.stash[SKIPPED_KEY] = True
    elif report.failed and call.excinfo is not None and FAILURE_KEY not in item.stash:
        item.stash[FAILURE_KEY] = FailureSummary.from_exception(
            item.name, call.excinfo.value, prefer_file=str(item.path)
        )


@pytest.fixture(scope="session")
def settings(request):
    return request.config.stash[SETTINGS_KEY]


@pytest.fixture(scope="session")
def testrail_client(settings):
    if not settings.testrail_enabled:
        yield None
        return
    client = TestRailClient.from_settings(settings)
    try:
        yield client
    finally:
        client.close()


# -----------------------------
# Per-test scope: logger + result reporting
# -----------------------------
def _report_outcome(node, settings, testrail_client, test_logger):
    if testrail_client is None or node.stash.get(SKIPPED_KEY, False):
        return
    result = build_result(node.name, node.stash.get(FAILURE_KEY, None), test_logger.get_logs())
    if result is None:
        return
    report_result(testrail_client, settings.testrail_run_id, result.case_id, result.passed, result.comment)


@pytest.fixture(autouse=True)
def test_scope(request, settings, testrail_client):
    """
    Owns the test's logger. Teardown runs on pass and on failure alike:
    the outcome goes to TestRail (when configured) and the buffer is dropped.
    """
    test_logger = TestLogger(request.node.name)
    try:
        yield test_logger
    finally:
        try:
            _report_outcome(request.node, settings, testrail_client, test_logger)
        except Exception as exc:  # reporting must not turn a pass into an error
            log_status("error", "TestRail reporting hook failed: ", repr(exc))
        test_logger.clear()


@pytest.fixture
def logger(test_scope):
    return test_scope


# -----------------------------
# API clients (one set per test)
# -----------------------------
@pytest_asyncio.fixture
async def http_client(settings):
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        yield client


@pytest.fixture
def gateway(http_client, settings, logger):
    return RequestGateway.from_settings(http_client, settings, logger)


@pytest.fixture
def auth_api(gateway):
    return AuthClient(gateway)


@pytest.fixture
def booking_api(gateway):
    return BookingClient(gateway)


@pytest.fixture
def health_api(gateway):
    return HealthClient(gateway)


@pytest_asyncio.fixture
async def token(auth_api, settings):
    return await auth_api.get_token(settings.booker_username, settings.booker_password)


# -----------------------------
# Offline helpers
# -----------------------------
@pytest_asyncio.fixture
async def make_gateway(logger):
    """Factory for gateways backed by httpx.MockTransport."""
    clients = []

    def _make(handler, base_url=MOCK_BASE_URL):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return RequestGateway(client, base_url, logger)

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def booking_payload():
    return {
        "firstname": "Sally",
        "lastname": "Brown",
        "totalprice": 111,
        "depositpaid": True,
        "additionalneeds": "Breakfast",
        "bookingdates": {
            "checkin": "2013-02-01",
            "checkout": "2013-02-04",
        },
    }
