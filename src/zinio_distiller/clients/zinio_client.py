"""Zinio API client for account, library and issue metadata."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from schemas.issue import Issue
from schemas.magazine import Library, Magazine
from schemas.session import Session

from .client import Client
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class ZinioClient(Client):
    """Client for the Zinio reader API.

    Logs in with account credentials and reads the user's library and the
    metadata of individual issues. Every response is validated against the
    schemas package before it is handed to the download pipeline.

    Example:
        config = {"base_url": "https://www.zinio.com"}
        with ZinioClient(config) as client:
            session = client.login("reader@example.com", "hunter2")
            for magazine in client.get_magazines(session):
                ...
    """

    LOGIN_PATH = "/api/login"
    LIBRARY_PATH = "/api/users/{user_id}/library"
    ISSUE_PATH = "/api/users/{user_id}/magazines/{magazine_id}/issues/{issue_id}"

    def login(self, email: str, password: str) -> Session:
        """Authenticate with account credentials.

        Args:
            email: Account email
            password: Account password

        Returns:
            Session handle for subsequent requests

        Raises:
            AuthenticationError: If the credentials are rejected
            ValidationError: If the response is not a valid session
        """
        response = self.post(
            self.LOGIN_PATH, json={"email": email, "password": password}
        )
        data = self._json(response, "login response")
        session = self._validate(Session, data, "login response")
        logger.debug(f"Logged in as user {session.user_id}")
        return session

    def get_magazines(self, session: Session) -> list[Magazine]:
        """Fetch every magazine in the user's library with its issues.

        Args:
            session: Session returned by login()

        Returns:
            List of validated Magazine objects

        Raises:
            ValidationError: If the response is not a valid library listing
        """
        path = self.LIBRARY_PATH.format(user_id=session.user_id)
        response = self.get(path, headers=session.auth_headers())
        data = self._json(response, "library")

        magazines = self._validate(Library, data, "library").magazines
        logger.debug(f"Library contains {len(magazines)} magazines")
        return magazines

    def get_issue(self, session: Session, magazine_id: str, issue_id: str) -> Issue:
        """Fetch the download metadata of one issue.

        Args:
            session: Session returned by login()
            magazine_id: Magazine identifier
            issue_id: Issue identifier

        Returns:
            Validated Issue including its page password and URL rule

        Raises:
            ValidationError: If the response is not valid issue metadata
        """
        path = self.ISSUE_PATH.format(
            user_id=session.user_id, magazine_id=magazine_id, issue_id=issue_id
        )
        response = self.get(path, headers=session.auth_headers())
        data = self._json(response, f"issue {issue_id}")
        if isinstance(data, dict):
            data.setdefault("magazine_id", magazine_id)

        return self._validate(Issue, data, f"issue {issue_id}")

    def _json(self, response: httpx.Response, label: str) -> Any:
        """Decode a JSON response body.

        Raises:
            ValidationError: If the body is not JSON
        """
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(
                f"Invalid {label}: response from {response.url} is not JSON",
                errors=[str(e)],
            ) from e

    def _validate(self, model: type[BaseModel], data: Any, label: str):
        """Validate raw response data against a schema model.

        Raises:
            ValidationError: If the data fails validation
        """
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {label}",
                errors=[err["msg"] for err in e.errors()],
            ) from e
