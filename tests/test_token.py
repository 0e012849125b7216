import pytest

from kbroker.token import (
    AttestationTokenVerifier,
    AttestationTokenVerifierConfig,
    AttestationTokenVerifierType,
)


def test_verifier_type_parses_from_string():
    assert AttestationTokenVerifierType("CoCo") is AttestationTokenVerifierType.COCO


def test_verifier_type_display():
    assert str(AttestationTokenVerifierType("CoCo")) == "CoCo"


def test_verifier_type_unknown():
    with pytest.raises(ValueError):
        AttestationTokenVerifierType("Other")


def test_config_defaults():
    config = AttestationTokenVerifierConfig()
    assert config.attestation_token_type is AttestationTokenVerifierType.COCO
    assert config.trusted_certs_paths is None


def test_config_accepts_type_name():
    config = AttestationTokenVerifierConfig(attestation_token_type="CoCo", trusted_certs_paths=["a.pem"])
    assert config.attestation_token_type is AttestationTokenVerifierType.COCO
    assert config.trusted_certs_paths == ["a.pem"]


def test_config_rejects_unknown_type():
    with pytest.raises(ValueError):
        AttestationTokenVerifierConfig(attestation_token_type="Other")


def test_verifier_is_abstract():
    with pytest.raises(TypeError):
        AttestationTokenVerifier()