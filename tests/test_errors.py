import json

import pytest

from kbroker.errors import (
    ERROR_TYPE_PREFIX,
    AttestationClaimsParseFailed,
    AttestationFailed,
    ExpiredCookie,
    FailedAuthentication,
    InvalidCookie,
    InvalidRequest,
    JWEFailed,
    KbsError,
    MissingCookie,
    PolicyEndpoint,
    PolicyEngineFailed,
    PolicyReject,
    PublicKeyGetFailed,
    ReadSecretFailed,
    SetSecretFailed,
    TokenIssueFailed,
    TokenParseFailed,
    UnAuthenticatedCookie,
    UserPublicKeyNotProvided,
)

CASES = [
    (AttestationFailed, ("test",), "Attestation failed: test"),
    (ExpiredCookie, (), "The cookie is expired"),
    (FailedAuthentication, ("test",), "Authentication failed: test"),
    (InvalidCookie, (), "The cookie is invalid"),
    (MissingCookie, (), "The cookie is missing"),
    (InvalidRequest, ("test",), "The request is invalid: test"),
    (JWEFailed, ("test",), "Json Web Encryption failed: test"),
    (PolicyEndpoint, ("test",), "Policy error: test"),
    (PolicyReject, (), "Resource not permitted."),
    (PublicKeyGetFailed, ("test",), "Public key get failed: test"),
    (ReadSecretFailed, ("test",), "Read secret failed: test"),
    (SetSecretFailed, ("test",), "Set secret failed: test"),
    (TokenIssueFailed, ("test",), "Attestation token issue failed: test"),
    (TokenParseFailed, ("test",), "Received an illegal token: test"),
    (UnAuthenticatedCookie, (), "The cookie is unauthenticated"),
    (UserPublicKeyNotProvided, (), "User public key not provided when launching the KBS"),
    (AttestationClaimsParseFailed, ("test",), "Received illegal attestation claims: test"),
    (PolicyEngineFailed, ("test",), "Resource policy engine evaluate failed: test"),
]


@pytest.mark.parametrize("cls, args, message", CASES)
def test_error_message(cls, args, message):
    err = cls(*args)
    assert str(err) == message
    assert KbsError.error_type(err) == f"{ERROR_TYPE_PREFIX}/{cls.__name__}"


@pytest.mark.parametrize("cls, args, message", CASES)
def test_into_error_response(cls, args, message):
    err = cls(*args)
    status, body = KbsError.to_response(err)
    info = json.loads(body)
    assert info == {
        "type": f"{ERROR_TYPE_PREFIX}/{cls.__name__}",
        "detail": message,
    }
    expected_status = 404 if cls is ReadSecretFailed else 401
    assert status == expected_status
    assert KbsError.status_code(err) == expected_status


def test_error_type_uses_variant_name():
    assert MissingCookie().error_type() == f"{ERROR_TYPE_PREFIX}/MissingCookie"


def test_errors_are_raisable_as_base():
    err = PolicyEndpoint("boom")
    assert err.status_code() == 401
    assert str(err) == "Policy error: boom"
    with pytest.raises(KbsError) as excinfo:
        raise err
    assert excinfo.value is err


def test_read_secret_failed_maps_to_not_found():
    assert ReadSecretFailed("missing").status_code() == 404


def test_reason_is_kept():
    assert InvalidRequest("no `type` in url").reason == "no `type` in url"