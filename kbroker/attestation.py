"""Interface of attestation services and the TEE types they handle."""

from __future__ import annotations

import base64
import secrets
from abc import ABC, abstractmethod
from enum import Enum

from .session import Challenge

AS_TOKEN_TEE_PUBKEY_PATH = "/customized_claims/runtime_data/tee-pubkey"

_NONCE_SIZE = 32


class Tee(Enum):
    """Trusted execution environments known to the broker."""

    AZ_SNP_VTPM = "azsnpvtpm"
    AZ_TDX_VTPM = "aztdxvtpm"
    SEV = "sev"
    SGX = "sgx"
    SNP = "snp"
    TDX = "tdx"
    CCA = "cca"
    CSV = "csv"
    SAMPLE = "sample"
    SE = "se"


class Attest(ABC):
    """An attestation service that checks evidence and issues result tokens."""

    def set_policy(self, policy_id: str, policy: str) -> None:
        """Store an attestation policy under ``policy_id``.

        Services that cannot store policies keep this default, which raises.
        """
        service = type(self).__name__
        message = f"Set Policy API is unimplemented ({service}, policy {policy_id!r})"
        raise RuntimeError(message)

    @abstractmethod
    def verify(self, tee: Tee, nonce: str, attestation: str) -> str:
        """Check attestation evidence and return the attestation results token."""

    def generate_challenge(self, tee: Tee, tee_parameters: str) -> Challenge:
        """Build the challenge handed to an attester: a random 32-byte nonce."""
        nonce = base64.b64encode(secrets.token_bytes(_NONCE_SIZE)).decode("ascii")
        return Challenge(nonce=nonce, extra_params="")