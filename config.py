import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_BASE_URL = "http://localhost:3000"


@dataclass(frozen=True)
class Settings:
    """
    Process-wide, read-only configuration.

    Built once per test session by load_settings() and handed to the
    gateway, the clients and the TestRail reporter. Nothing reads the
    environment after that.
    """
    base_url: str = DEFAULT_BASE_URL
    booker_username: str = "admin"
    booker_password: str = "password123"
    request_timeout: float = 10.0
    testrail_base_url: Optional[str] = None
    testrail_email: Optional[str] = None
    testrail_api_key: Optional[str] = None
    testrail_run_id: Optional[int] = None
    run_live: bool = False

    @property
    def testrail_enabled(self) -> bool:
        return all([
            self.testrail_base_url,
            self.testrail_email,
            self.testrail_api_key,
            self.testrail_run_id is not None,
        ])


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    run_id = env.get("TESTRAIL_RUN_ID")

    return Settings(
        base_url=(env.get("BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        booker_username=env.get("BOOKER_USERNAME", "admin"),
        booker_password=env.get("BOOKER_PASSWORD", "password123"),
        request_timeout=float(env.get("REQUEST_TIMEOUT", "10")),
        testrail_base_url=(env.get("TESTRAIL_BASE_URL") or "").rstrip("/") or None,
        testrail_email=env.get("TESTRAIL_EMAIL") or None,
        testrail_api_key=env.get("TESTRAIL_API_KEY") or None,
        testrail_run_id=int(run_id) if run_id else None,
        run_live=_flag(env.get("RUN_LIVE_TESTS")),
    )
