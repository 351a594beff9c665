"""GitHub GraphQL API client."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import time
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "api.github.com"

# Environment variables checked for a token, in order
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthError(GitHubClientError):
    """Authentication failed."""

    pass


class GitHubNotFoundError(GitHubClientError):
    """Resource not found."""

    pass


class GitHubForbiddenError(GitHubClientError):
    """Permission denied."""

    pass


class GitHubRateLimitError(GitHubClientError):
    """Rate limit exceeded."""

    pass


class GitHubGraphQLError(GitHubClientError):
    """The GraphQL endpoint answered with an ``errors`` payload.

    Keeps the raw error objects so callers can inspect the structured
    ``type`` codes instead of parsing the message text.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @property
    def types(self) -> list[str]:
        """The ``type`` codes reported by the host (may be empty)."""
        return [e.get("type", "") for e in self.errors if e.get("type")]

    @property
    def messages(self) -> list[str]:
        return [e.get("message", str(e)) for e in self.errors]


class GitHubClient:
    """GitHub GraphQL API client.

    Thin wrapper around the GitHub GraphQL endpoint:
    - Token authentication (from env vars or the gh CLI)
    - Enterprise support via custom base_url
    - HTTP and GraphQL error classification
    """

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0):
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token
            base_url: API host (default: api.github.com, use custom for Enterprise)
            timeout: Request timeout in seconds
        """
        self.token = token
        self.base_url = base_url
        self._graphql_url = f"https://{base_url}/graphql"
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "GraphQL-Features": "sub_issues",
            },
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @classmethod
    def from_environment(cls, base_url: str = DEFAULT_BASE_URL) -> GitHubClient:
        """Create a client from environment variables or the gh CLI.

        Tries in order:
        1. GITHUB_TOKEN environment variable
        2. GH_TOKEN environment variable
        3. gh auth token (if gh CLI is installed and authenticated)

        Raises:
            GitHubAuthError: If no token is available
        """
        for var in TOKEN_ENV_VARS:
            token = os.environ.get(var)
            if token:
                logger.debug("Using token from %s environment variable", var)
                return cls(token, base_url)

        cmd = ["gh", "auth", "token"]
        if base_url != DEFAULT_BASE_URL:
            cmd += ["--hostname", base_url]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            token = result.stdout.strip()
            if token:
                logger.debug("Using token from gh CLI")
                return cls(token, base_url)
        except (subprocess.CalledProcessError, FileNotFoundError):
            logger.debug("gh CLI not available or not authenticated")

        logger.error("No GitHub token found")
        raise GitHubAuthError(
            "No GitHub token found. Either:\n"
            "  - Set GITHUB_TOKEN (or GH_TOKEN) environment variable\n"
            "  - Run 'gh auth login' to authenticate with GitHub CLI"
        )

    def execute(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query or mutation.

        Returns:
            The ``data`` member of the GraphQL response

        Raises:
            GitHubAuthError: Authentication failed
            GitHubNotFoundError: Resource not found
            GitHubForbiddenError: Permission denied
            GitHubRateLimitError: Rate limit exceeded
            GitHubGraphQLError: Any other GraphQL-level error
            GitHubClientError: Transport or HTTP errors
        """
        op_name = _operation_name(document)

        payload: dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables

        # Variables only at DEBUG, they can carry issue bodies
        logger.debug("GraphQL %s: variables=%s", op_name, variables)

        start_time = time.monotonic()
        try:
            response = self._client.post(self._graphql_url, json=payload)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("GraphQL %s failed after %.0fms: %s", op_name, elapsed_ms, e)
            raise GitHubClientError(f"Request failed: {e}") from e
        elapsed_ms = (time.monotonic() - start_time) * 1000

        self._raise_for_status(op_name, response, elapsed_ms)

        try:
            result = response.json()
        except ValueError as e:
            logger.error("GraphQL %s: Invalid JSON response (%.0fms)", op_name, elapsed_ms)
            raise GitHubClientError(f"Invalid JSON response: {e}") from e

        if result.get("errors"):
            self._raise_for_errors(op_name, result["errors"], elapsed_ms)

        logger.info("GraphQL %s: 200 OK (%.0fms)", op_name, elapsed_ms)
        return result.get("data") or {}

    def query(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query (alias for execute)."""
        return self.execute(document, variables)

    def mutate(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL mutation (alias for execute)."""
        return self.execute(document, variables)

    def _raise_for_status(self, op_name: str, response: httpx.Response, elapsed_ms: float) -> None:
        status = response.status_code
        if status < 400:
            return

        logger.error("GraphQL %s: HTTP %d (%.0fms)", op_name, status, elapsed_ms)
        if status == 401:
            raise GitHubAuthError(
                "Authentication failed. Check your GITHUB_TOKEN.\n"
                "Required scopes: project, repo"
            )
        if status == 403:
            if "rate limit" in response.text.lower():
                raise GitHubRateLimitError("GitHub API rate limit exceeded. Try again later.")
            raise GitHubForbiddenError(
                "Permission denied. Check that your token has the required scopes:\n"
                "  - project (for reading and modifying project items)\n"
                "  - repo (for issue operations)"
            )
        if status == 404:
            raise GitHubNotFoundError("Resource not found")
        raise GitHubClientError(f"HTTP {status}: {response.text}")

    def _raise_for_errors(
        self, op_name: str, errors: list[dict[str, Any]], elapsed_ms: float
    ) -> None:
        for error in errors:
            error_type = error.get("type", "")
            message = error.get("message", "")

            if error_type == "NOT_FOUND":
                logger.error("GraphQL %s: Not Found - %s (%.0fms)", op_name, message, elapsed_ms)
                raise GitHubNotFoundError(message)
            if error_type == "FORBIDDEN":
                logger.error("GraphQL %s: Forbidden - %s (%.0fms)", op_name, message, elapsed_ms)
                raise GitHubForbiddenError(message)
            if error_type == "RATE_LIMITED":
                logger.error("GraphQL %s: Rate Limited (%.0fms)", op_name, elapsed_ms)
                raise GitHubRateLimitError(message)

        messages = [e.get("message", str(e)) for e in errors]
        logger.error("GraphQL %s: errors=%s (%.0fms)", op_name, messages, elapsed_ms)
        raise GitHubGraphQLError(f"GraphQL errors: {'; '.join(messages)}", errors)


def _operation_name(document: str) -> str:
    """Extract the operation name ("query GetProject" -> "GetProject")."""
    match = re.search(r"(?:query|mutation)\s+(\w+)", document)
    return match.group(1) if match else "anonymous"
