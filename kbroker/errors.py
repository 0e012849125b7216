"""Errors raised by the broker's HTTP endpoints and their wire representation."""

from __future__ import annotations

import json
import logging

logger = logging.getLogger(__name__)

ERROR_TYPE_PREFIX = "kbs/errors"

HTTP_UNAUTHORIZED = 401
HTTP_NOT_FOUND = 404


class KbsError(Exception):
    """Base class of every error an endpoint reports to its caller."""

    _template = "{reason}"

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(self._template.format(reason=reason))

    def error_type(self) -> str:
        """The error type URI sent in the response body."""
        return f"{ERROR_TYPE_PREFIX}/{type(self).__name__}"

    def status_code(self) -> int:
        """The HTTP status code that goes with this error."""
        return HTTP_UNAUTHORIZED

    def to_response(self) -> tuple[int, str]:
        """Return the HTTP status code and the JSON body describing this error."""
        logger.error("%s", self)
        body = json.dumps({"type": self.error_type(), "detail": str(self)})
        return self.status_code(), body


class AttestationFailed(KbsError):
    _template = "Attestation failed: {reason}"


class AttestationClaimsParseFailed(KbsError):
    _template = "Received illegal attestation claims: {reason}"


class ExpiredCookie(KbsError):
    _template = "The cookie is expired"


class FailedAuthentication(KbsError):
    _template = "Authentication failed: {reason}"


class InvalidCookie(KbsError):
    _template = "The cookie is invalid"


class InvalidRequest(KbsError):
    _template = "The request is invalid: {reason}"


class JWEFailed(KbsError):
    _template = "Json Web Encryption failed: {reason}"


class MissingCookie(KbsError):
    _template = "The cookie is missing"


class PolicyEndpoint(KbsError):
    _template = "Policy error: {reason}"


class PolicyEngineFailed(KbsError):
    _template = "Resource policy engine evaluate failed: {reason}"


class PolicyReject(KbsError):
    _template = "Resource not permitted."


class PublicKeyGetFailed(KbsError):
    _template = "Public key get failed: {reason}"


class ReadSecretFailed(KbsError):
    _template = "Read secret failed: {reason}"

    def status_code(self) -> int:
        return HTTP_NOT_FOUND


class SetSecretFailed(KbsError):
    _template = "Set secret failed: {reason}"


class TokenIssueFailed(KbsError):
    _template = "Attestation token issue failed: {reason}"


class TokenParseFailed(KbsError):
    _template = "Received an illegal token: {reason}"


class UnAuthenticatedCookie(KbsError):
    _template = "The cookie is unauthenticated"


class UserPublicKeyNotProvided(KbsError):
    _template = "User public key not provided when launching the KBS"