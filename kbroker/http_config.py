"""Administrative endpoints: policies and resource upload, guarded by a signed JWT."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import jwt

from .attestation import Attest
from .errors import FailedAuthentication, InvalidRequest, PolicyEndpoint, SetSecretFailed, UserPublicKeyNotProvided
from .policy import PolicyEngineInterface
from .resource import Repository, resource_desc_from_params, set_secret_resource

logger = logging.getLogger(__name__)


def _bearer_token(authorization: str | None) -> str:
    if authorization is None:
        raise ValueError("no Authorization header")
    scheme, _, credentials = authorization.strip().partition(" ")
    credentials = credentials.strip()
    if scheme != "Bearer" or not credentials:
        raise ValueError("invalid Bearer authorization")
    return credentials


def authorize(authorization: str | None, user_pub_key: Any, insecure: bool) -> dict | None:
    """Check that the bearer JWT is signed by the owner's Ed25519 key; return its claims."""
    if insecure:
        return None
    if user_pub_key is None:
        raise UserPublicKeyNotProvided()
    try:
        token = _bearer_token(authorization)
        return jwt.decode(token, user_pub_key, algorithms=["EdDSA"])
    except (ValueError, jwt.PyJWTError) as exc:
        raise FailedAuthentication(f"Requester is not an authorized user: {exc}") from exc


def attestation_policy(
    payload: Mapping[str, Any],
    authorization: str | None,
    user_pub_key: Any,
    insecure: bool,
    attestation_service: Attest,
) -> None:
    """Serve ``POST /attestation-policy``."""
    try:
        policy_id = payload["policy_id"]
        policy = payload["policy"]
    except (KeyError, TypeError) as exc:
        raise InvalidRequest(f"illegal policy request: missing {exc}") from exc
    if not isinstance(policy_id, str) or not isinstance(policy, str):
        raise InvalidRequest("illegal policy request: `policy_id` and `policy` must be strings")

    authorize(authorization, user_pub_key, insecure)

    try:
        attestation_service.set_policy(policy_id, policy)
    except Exception as exc:
        raise PolicyEndpoint(f"Set policy error {exc}") from exc


def resource_policy(
    payload: Any,
    authorization: str | None,
    user_pub_key: Any,
    insecure: bool,
    policy_engine: PolicyEngineInterface,
) -> None:
    """Serve ``POST /resource-policy``."""
    authorize(authorization, user_pub_key, insecure)

    policy = payload.get("policy") if isinstance(payload, Mapping) else None
    if not isinstance(policy, str):
        raise PolicyEndpoint("Get policy from request failed")

    try:
        policy_engine.set_policy(policy)
    except Exception as exc:
        raise PolicyEndpoint(f"Set policy error {exc}") from exc


def set_resource(
    params: Mapping[str, str],
    data: bytes,
    authorization: str | None,
    user_pub_key: Any,
    insecure: bool,
    repository: Repository,
) -> None:
    """Serve ``POST /resource/...``: store the request body as a resource."""
    authorize(authorization, user_pub_key, insecure)
    resource_desc = resource_desc_from_params(params)
    try:
        set_secret_resource(repository, resource_desc, data)
    except Exception as exc:
        raise SetSecretFailed(str(exc)) from exc