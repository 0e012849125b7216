"""Client for the broker's administrative HTTP API."""

from __future__ import annotations

import base64
import ssl
import time
from collections.abc import Iterable

import httpx
import jwt
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import load_pem_private_key

KBS_URL_PREFIX = "kbs/v0"
CLIENT_VERSION = "0.1.0"
USER_AGENT = f"kbs-client/{CLIENT_VERSION}"
TOKEN_LIFETIME_SECONDS = 2 * 60 * 60
DEFAULT_POLICY_TYPE = "rego"
DEFAULT_POLICY_ID = "default"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def sign_auth_token(auth_key: str) -> str:
    """Sign a JWT valid for two hours with the owner's Ed25519 private key (PEM)."""
    try:
        key = load_pem_private_key(auth_key.encode("utf-8"), password=None)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"invalid auth private key: {exc}") from exc
    if not isinstance(key, Ed25519PrivateKey):
        raise ValueError("auth private key is not an Ed25519 key")
    now = int(time.time())
    claims = {"iat": now, "nbf": now, "exp": now + TOKEN_LIFETIME_SECONDS}
    return jwt.encode(claims, key, algorithm="EdDSA")


def build_http_client(kbs_root_certs_pem: Iterable[str] = ()) -> httpx.Client:
    """Build an HTTP client trusting the given extra root certificates (PEM)."""
    verify: ssl.SSLContext | bool = True
    certs = list(kbs_root_certs_pem)
    if certs:
        context = ssl.create_default_context()
        for pem in certs:
            try:
                context.load_verify_locations(cadata=pem)
            except (ssl.SSLError, ValueError) as exc:
                raise ValueError(f"Build KBS http client failed: invalid root certificate: {exc}") from exc
        verify = context
    return httpx.Client(verify=verify, headers={"User-Agent": USER_AGENT})


def _post(url: str, auth_key: str, kbs_root_certs_pem: Iterable[str], **request_kwargs) -> None:
    token = sign_auth_token(auth_key)
    headers = {"Authorization": f"Bearer {token}", **request_kwargs.pop("headers", {})}
    with build_http_client(kbs_root_certs_pem) as client:
        response = client.post(url, headers=headers, **request_kwargs)
    if response.status_code != httpx.codes.OK:
        raise RuntimeError(f"Request Failed, Response: {response.text!r}")


def set_attestation_policy(
    url: str,
    auth_key: str,
    policy_bytes: bytes,
    policy_type: str | None = None,
    policy_id: str | None = None,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Upload an attestation policy; type defaults to ``rego`` and id to ``default``."""
    payload = {
        "type": policy_type if policy_type is not None else DEFAULT_POLICY_TYPE,
        "policy_id": policy_id if policy_id is not None else DEFAULT_POLICY_ID,
        "policy": _b64url(policy_bytes),
    }
    _post(f"{url}/{KBS_URL_PREFIX}/attestation-policy", auth_key, kbs_root_certs_pem, json=payload)


def set_resource_policy(
    url: str,
    auth_key: str,
    policy_bytes: bytes,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Upload the resource policy."""
    payload = {"policy": _b64url(policy_bytes)}
    _post(f"{url}/{KBS_URL_PREFIX}/resource-policy", auth_key, kbs_root_certs_pem, json=payload)


def set_resource(
    url: str,
    auth_key: str,
    resource_bytes: bytes,
    path: str,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Store a secret resource at ``<repository>/<type>/<tag>``."""
    _post(
        f"{url}/{KBS_URL_PREFIX}/resource/{path}",
        auth_key,
        kbs_root_certs_pem,
        content=bytes(resource_bytes),
        headers={"Content-Type": "application/octet-stream"},
    )