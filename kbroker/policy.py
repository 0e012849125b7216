"""Interface, errors and configuration of the resource policy engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_POLICY_PATH = "/opa/confidential-containers/kbs/policy.rego"


class ResourcePolicyError(Exception):
    """Base class of resource policy failures."""

    _template = "Resource policy error"

    def __init__(self, cause: BaseException | str | None = None) -> None:
        self.cause = cause
        super().__init__(self._template.format(cause=cause))


class EvaluationError(ResourcePolicyError):
    _template = "Failed to evaluate resource policy {cause}"


class DataLoadError(ResourcePolicyError):
    _template = "Failed to load data for resource policy"


class ResourcePathError(ResourcePolicyError):
    _template = "Invalid resource path format"


class PolicyIOError(ResourcePolicyError):
    _template = "Resource Policy IO Error: {cause}"


class DecodeError(ResourcePolicyError):
    _template = "Decoding (base64) resource policy failed: {cause}"


class InputError(ResourcePolicyError):
    _template = "Failed to load input for resource policy"


class PolicyLoadError(ResourcePolicyError):
    _template = "Failed to load resource policy"


class PolicyEngineInterface(ABC):
    """Decides whether attested claims grant access to a resource."""

    @abstractmethod
    def evaluate(self, resource_path: str, input_claims: str) -> bool:
        """Return whether the claims allow access to ``<top>/<middle>/<tail>``."""

    @abstractmethod
    def set_policy(self, policy: str) -> None:
        """Replace the policy with a base64url-encoded one."""


@dataclass
class PolicyEngineConfig:
    """Where the resource policy file lives."""

    policy_path: str | None = DEFAULT_POLICY_PATH