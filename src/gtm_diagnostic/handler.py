"""Request handling for the diagnostic endpoint.

Method check, shared-token check and payload validation sit here, in front of
the core pipeline. Kept free of any web framework so the HTTP route and tests
call the same function.
"""

from __future__ import annotations

import hmac
import logging
import os
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .core.diagnostic import run_diagnostic

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-vw-token"
TOKEN_ENV = "VW_TOKEN"


class RequestError(Exception):
    """A request rejected before reaching the core."""

    def __init__(self, status_code: int, message: str, details: Optional[list] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class DiagnosticRequest(BaseModel):
    """Payload accepted by the diagnostic endpoint."""

    model_config = ConfigDict(extra="ignore")

    answers: dict[str, Union[str, int, float]]
    tier: Any = "exec"
    client_name: str = ""
    client_email: str = ""

    @field_validator("answers")
    @classmethod
    def _stringify_answers(cls, value: dict[str, Union[str, int, float]]) -> dict[str, str]:
        if not value:
            raise ValueError("answers must not be empty")
        return {k: v if isinstance(v, str) else str(v) for k, v in value.items()}

    @field_validator("client_name", "client_email", mode="before")
    @classmethod
    def _non_string_to_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


def _expected_token() -> str:
    return os.environ.get(TOKEN_ENV, "")


def authorize(token: Optional[str]) -> None:
    """Reject unless token matches the configured secret. An unset secret rejects everything."""
    expected = _expected_token()
    if not token or not expected or not hmac.compare_digest(token.encode(), expected.encode()):
        raise RequestError(401, "Unauthorized")


def parse_request(body: Any) -> DiagnosticRequest:
    if not isinstance(body, dict):
        raise RequestError(400, "Invalid payload", [{"loc": [], "msg": "request body must be a JSON object"}])
    try:
        return DiagnosticRequest.model_validate(body)
    except ValidationError as exc:
        raise RequestError(400, "Invalid payload", exc.errors(include_url=False, include_context=False)) from exc


def handle_request(method: str, headers: Mapping[str, str], body: Any) -> tuple[int, dict[str, Any]]:
    """Process one diagnostic request.

    Args:
        method: HTTP method.
        headers: Request headers; lookups use the lower-case header name.
        body: Decoded JSON body.

    Returns:
        (status_code, response payload).
    """
    try:
        if method.upper() != "POST":
            raise RequestError(405, "POST only")
        authorize(headers.get(TOKEN_HEADER))
        request = parse_request(body)
    except RequestError as exc:
        logger.warning("Rejected diagnostic request: %d %s", exc.status_code, exc.message)
        return exc.status_code, exc.to_payload()

    result = run_diagnostic(
        request.answers,
        tier=request.tier,
        client_name=request.client_name,
        client_email=request.client_email,
    )
    return 200, result
