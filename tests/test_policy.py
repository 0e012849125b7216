import pytest

from kbroker.policy import (
    DataLoadError,
    DecodeError,
    EvaluationError,
    InputError,
    PolicyEngineConfig,
    PolicyEngineInterface,
    PolicyIOError,
    PolicyLoadError,
    ResourcePathError,
    ResourcePolicyError,
)


@pytest.mark.parametrize(
    "cls, message",
    [
        (DataLoadError, "Failed to load data for resource policy"),
        (ResourcePathError, "Invalid resource path format"),
        (InputError, "Failed to load input for resource policy"),
        (PolicyLoadError, "Failed to load resource policy"),
    ],
)
def test_plain_error_messages(cls, message):
    error = cls()
    assert str(error) == message
    assert isinstance(error, ResourcePolicyError)


def test_evaluation_error_carries_cause():
    cause = ValueError("boom")
    error = EvaluationError(cause)
    assert str(error) == "Failed to evaluate resource policy boom"
    assert error.cause is cause


def test_io_error_message():
    assert str(PolicyIOError(OSError("disk"))) == "Resource Policy IO Error: disk"


def test_decode_error_message():
    assert str(DecodeError("bad symbol")) == "Decoding (base64) resource policy failed: bad symbol"


def test_errors_are_caught_by_base_class():
    error = PolicyLoadError()
    assert str(error) == "Failed to load resource policy"
    with pytest.raises(ResourcePolicyError) as excinfo:
        raise error
    assert excinfo.value is error


def test_default_config_path():
    assert PolicyEngineConfig().policy_path == "/opa/confidential-containers/kbs/policy.rego"


def test_config_custom_path():
    assert PolicyEngineConfig(policy_path="/tmp/p.rego").policy_path == "/tmp/p.rego"


def test_interface_requires_both_methods():
    class Half(PolicyEngineInterface):
        def evaluate(self, resource_path, input_claims):
            return True

    with pytest.raises(TypeError):
        PolicyEngineInterface()
    with pytest.raises(TypeError):
        Half()