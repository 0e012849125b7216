"""Interface and configuration of attestation token verifiers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class AttestationTokenVerifier(ABC):
    """Checks signed attestation tokens."""

    @abstractmethod
    def verify(self, token: str) -> str:
        """Verify a signed token and return its custom claims as a JSON string."""


class AttestationTokenVerifierType(Enum):
    COCO = "CoCo"

    def __str__(self) -> str:
        return self.value


@dataclass
class AttestationTokenVerifierConfig:
    attestation_token_type: AttestationTokenVerifierType = AttestationTokenVerifierType.COCO
    # Trusted certificate files (PEM) used to check the token signature.
    trusted_certs_paths: list[str] | None = None

    def __post_init__(self) -> None:
        self.attestation_token_type = AttestationTokenVerifierType(self.attestation_token_type)