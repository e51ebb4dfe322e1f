from typing import Any, Mapping, Optional, Union

from api_helpers import RawResponse, RequestGateway
from models import AuthCredential, AuthOutcome
from normalizer import decode_mapping

AUTH_ENDPOINTS = {
    "TOKEN": "/auth",
}

Credentials = Union[AuthCredential, Mapping[str, Any], None]


def _credentials_body(credentials: Credentials) -> Optional[dict]:
    if credentials is None:
        return None
    if isinstance(credentials, AuthCredential):
        return credentials.to_dict()
    return dict(credentials)


class AuthClient:
    """
    POST /auth.

    restful-booker reports bad credentials as 200 with {"reason": ...}, so
    nothing here treats a failed login as an error. Callers look at the
    outcome instead.
    """

    def __init__(self, gateway: RequestGateway):
        self.gateway = gateway

    @property
    def logger(self):
        return self.gateway.logger

    async def authenticate(self, credentials: Credentials) -> RawResponse:
        return await self.gateway.post(AUTH_ENDPOINTS["TOKEN"], data=_credentials_body(credentials))

    def _outcome(self, response: RawResponse) -> AuthOutcome:
        return decode_mapping(self.gateway.read_body(response), AuthOutcome)

    async def get_token(self, username: str, password: str) -> str:
        response = await self.authenticate(AuthCredential(username=username, password=password))
        outcome = self._outcome(response)

        if self.logger is not None:
            if outcome.token:
                self.logger.log("Token obtained successfully")
            else:
                self.logger.error(f"Authentication failed: {outcome.reason}")

        return outcome.token or ""

    async def authenticate_and_expect_failure(
        self,
        credentials: Credentials,
        expected_status: int = 200,
    ) -> AuthOutcome:
        response = await self.gateway.post(
            AUTH_ENDPOINTS["TOKEN"],
            data=_credentials_body(credentials),
            expected_status=expected_status,
        )
        return self._outcome(response)
