"""The resource retrieval endpoint: claims lookup, policy check and JWE wrapping."""

from __future__ import annotations

import base64
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .attestation import AS_TOKEN_TEE_PUBKEY_PATH
from .errors import (
    AttestationClaimsParseFailed,
    ExpiredCookie,
    InvalidRequest,
    JWEFailed,
    KbsError,
    PolicyEngineFailed,
    PolicyReject,
    ReadSecretFailed,
    TokenParseFailed,
    UnAuthenticatedCookie,
)
from .policy import PolicyEngineInterface
from .resource import Repository, resource_desc_from_params
from .session import SessionMap, SessionState
from .token import AttestationTokenVerifier

logger = logging.getLogger(__name__)

TOKEN_TEE_PUBKEY_PATH = AS_TOKEN_TEE_PUBKEY_PATH
RSA_ALGORITHM = "RSA1_5"
AES_GCM_256_ALGORITHM = "A256GCM"
_IV_SIZE = 12
_MISSING = object()


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(text: str) -> bytes:
    if "=" in text:
        raise ValueError("padding is not allowed")
    return base64.b64decode(text + "=" * (-len(text) % 4), altchars=b"-_", validate=True)


@dataclass(frozen=True)
class TeePubKey:
    """The RSA public key a TEE sends, as base64url modulus and exponent."""

    kty: str
    alg: str
    k_mod: str
    k_exp: str

    @classmethod
    def from_value(cls, value: Any) -> TeePubKey:
        """Build a key from its JSON object form (``kty``, ``alg``, ``n``, ``e``)."""
        if not isinstance(value, Mapping):
            raise AttestationClaimsParseFailed("illegal attestation claims: tee-pubkey is not an object")
        fields = {}
        for name, key in (("kty", "kty"), ("alg", "alg"), ("k_mod", "n"), ("k_exp", "e")):
            item = value.get(key)
            if not isinstance(item, str):
                raise AttestationClaimsParseFailed(
                    f"illegal attestation claims: missing or invalid field `{key}`"
                )
            fields[name] = item
        return cls(**fields)


@dataclass(frozen=True)
class JweResponse:
    """A resource wrapped in a JSON Web Encryption envelope."""

    protected: str
    encrypted_key: str
    iv: str
    ciphertext: str
    tag: str

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))


def jwe(tee_pub_key: TeePubKey, payload_data: bytes) -> JweResponse:
    """Encrypt a payload with a fresh AES-256-GCM key wrapped by the TEE's RSA key."""
    if tee_pub_key.alg != RSA_ALGORITHM:
        raise JWEFailed(f"algorithm is not {RSA_ALGORITHM} but {tee_pub_key.alg}")

    sym_key = AESGCM.generate_key(bit_length=256)
    iv = os.urandom(_IV_SIZE)
    ciphertext = AESGCM(sym_key).encrypt(iv, bytes(payload_data), None)

    try:
        modulus = int.from_bytes(_b64url_decode(tee_pub_key.k_mod), "big")
    except ValueError as exc:
        raise JWEFailed(f"base64 decode k_mod failed: {exc}") from exc
    try:
        exponent = int.from_bytes(_b64url_decode(tee_pub_key.k_exp), "big")
    except ValueError as exc:
        raise JWEFailed(f"base64 decode k_exp failed: {exc}") from exc

    try:
        rsa_key = rsa.RSAPublicNumbers(exponent, modulus).public_key()
    except ValueError as exc:
        raise JWEFailed(f"Building RSA key from modulus and exponent failed: {exc}") from exc
    try:
        wrapped_sym_key = rsa_key.encrypt(sym_key, padding.PKCS1v15())
    except ValueError as exc:
        raise JWEFailed(f"RSA encrypt sym key failed: {exc}") from exc

    protected = json.dumps({"alg": RSA_ALGORITHM, "enc": AES_GCM_256_ALGORITHM}, separators=(",", ":"))
    return JweResponse(
        protected=protected,
        encrypted_key=_b64url_encode(wrapped_sym_key),
        iv=_b64url_encode(iv),
        ciphertext=_b64url_encode(ciphertext),
        tag="",
    )


def claims_from_session(session_map: SessionMap, cookie: str | None) -> str:
    """Return the attestation claims of the attested session named by ``cookie``."""
    if not cookie:
        raise UnAuthenticatedCookie()
    session = session_map.get(cookie)
    if session is None:
        raise UnAuthenticatedCookie()
    logger.info("Cookie %s request to get resource", session.id)
    if session.is_expired():
        logger.error("Expired KBS cookie %s", cookie)
        raise ExpiredCookie()
    if session.state is not SessionState.ATTESTED or session.attestation_claims is None:
        raise UnAuthenticatedCookie()
    return session.attestation_claims


def _bearer_token(authorization: str | None) -> str:
    if authorization is None:
        raise ValueError("no Authorization header")
    scheme, _, credentials = authorization.strip().partition(" ")
    credentials = credentials.strip()
    if scheme != "Bearer" or not credentials:
        raise ValueError("invalid Bearer authorization")
    return credentials


def claims_from_header(authorization: str | None, token_verifier: AttestationTokenVerifier) -> str:
    """Verify the bearer token of an Authorization header and return its claims."""
    try:
        token = _bearer_token(authorization)
    except ValueError as exc:
        raise InvalidRequest(f"parse Authorization header failed: {exc}") from exc
    try:
        return token_verifier.verify(token)
    except Exception as exc:
        raise TokenParseFailed(f"verify token failed: {exc}") from exc


def _json_pointer(document: Any, pointer: str) -> Any:
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        return _MISSING
    current = document
    for part in pointer[1:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, list):
            if not part.isdigit() or (len(part) > 1 and part.startswith("0")):
                return _MISSING
            index = int(part)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def get_resource(
    params: Mapping[str, str],
    repository: Repository,
    token_verifier: AttestationTokenVerifier,
    session_map: SessionMap | None = None,
    cookie: str | None = None,
    authorization: str | None = None,
    policy_engine: PolicyEngineInterface | None = None,
) -> str:
    """Serve ``GET /resource/...``: return the resource as a JWE JSON body."""
    claims_str = None
    if session_map is not None:
        try:
            claims_str = claims_from_session(session_map, cookie)
            logger.debug("Get pkey from session.")
        except KbsError:
            claims_str = None
    if claims_str is None:
        logger.debug("Get pkey from auth header")
        claims_str = claims_from_header(authorization, token_verifier)

    try:
        claims = json.loads(claims_str)
    except ValueError as exc:
        raise AttestationClaimsParseFailed(f"illegal attestation claims: {exc}") from exc

    pkey_value = _json_pointer(claims, TOKEN_TEE_PUBKEY_PATH)
    if pkey_value is _MISSING:
        raise AttestationClaimsParseFailed("Failed to find `tee-pubkey` in the attestation claims")
    pubkey = TeePubKey.from_value(pkey_value)

    resource_desc = resource_desc_from_params(params)
    if not resource_desc.is_valid():
        raise InvalidRequest("Invalid resource path")

    logger.info("Get resource from kbs:///%s", resource_desc)

    if policy_engine is not None:
        try:
            allowed = policy_engine.evaluate(str(resource_desc), claims_str)
        except Exception as exc:
            raise PolicyEngineFailed(str(exc)) from exc
        if not allowed:
            raise PolicyReject()
        logger.info("Resource access request passes policy check.")

    try:
        resource_bytes = repository.read_secret_resource(resource_desc)
    except Exception as exc:
        raise ReadSecretFailed(str(exc)) from exc

    return jwe(pubkey, resource_bytes).to_json()