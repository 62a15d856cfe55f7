"""HTTP client for the remote user directory (JSONPlaceholder-compatible)."""

from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from clientbook.clients.client_models import RemoteUser
from clientbook.config.loader import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from clientbook.errors import DecodeError, NetworkError
from clientbook.utils.logging import get_logger

logger = get_logger(__name__)


class RemoteClient:
    """
    Thin wrapper around the remote /users resource.

    Every call is a single request whose body is fully buffered. Transport
    problems and non-2xx statuses raise NetworkError; bodies that don't match
    the user shape raise DecodeError.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self.user_agent = user_agent
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "RemoteClient":
        return cls(
            settings["base_url"],
            timeout_seconds=settings["timeout_seconds"],
            user_agent=settings["user_agent"],
        )

    def fetch_users(self) -> List[RemoteUser]:
        """
        GET /users and decode the JSON array.

        Returns:
            List of RemoteUser in response order

        Raises:
            NetworkError: Request failed or returned a non-2xx status
            DecodeError: Body is not a JSON array of user objects
        """
        data = self._request("GET", "users")
        if not isinstance(data, list):
            raise DecodeError(f"Expected a JSON array from {self.base_url}/users, got {type(data).__name__}")
        users = [self._decode_user(item) for item in data]
        logger.info(f"Fetched {len(users)} users from {self.base_url}")
        return users

    def fetch_user(self, user_id: int) -> RemoteUser:
        return self._decode_user(self._request("GET", f"users/{user_id}"))

    def create_user(self, user: RemoteUser) -> RemoteUser:
        """POST a user; the service echoes it back with its assigned id."""
        payload = user.model_dump(exclude={"id"})
        return self._decode_user(self._request("POST", "users", json_body=payload))

    def update_user(self, user: RemoteUser) -> RemoteUser:
        return self._decode_user(self._request("PUT", f"users/{user.id}", json_body=user.model_dump()))

    def delete_user(self, user_id: int) -> None:
        self._request("DELETE", f"users/{user_id}", expect_body=False)

    def close(self) -> None:
        self.session.close()

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        expect_body: bool = True,
    ) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._get_headers(),
                json=json_body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not expect_body:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"{method} {url} returned a body that is not JSON: {e}") from e

    @staticmethod
    def _decode_user(payload: Any) -> RemoteUser:
        if not isinstance(payload, dict):
            raise DecodeError(f"Expected a user object, got {type(payload).__name__}")
        try:
            return RemoteUser.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"Malformed user payload: {e}") from e
