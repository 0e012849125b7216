"""Secret resource descriptions and the repositories that store them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidRequest

DEFAULT_REPO_DIR_PATH = "/opt/confidential-containers/kbs/repository"
DEFAULT_REPOSITORY_NAME = "default"
LOCAL_FS_TYPE = "LocalFs"


@dataclass(frozen=True)
class ResourceDesc:
    """Where a resource lives: ``<repository>/<type>/<tag>``."""

    repository_name: str
    resource_type: str
    resource_tag: str

    def is_valid(self) -> bool:
        return self.repository_name not in (".", "..") and self.resource_type not in (".", "..")

    def __str__(self) -> str:
        return f"{self.repository_name}/{self.resource_type}/{self.resource_tag}"


class Repository(ABC):
    """Storage for secret resources."""

    @abstractmethod
    def read_secret_resource(self, resource_desc: ResourceDesc) -> bytes:
        """Return the bytes of a resource."""

    @abstractmethod
    def write_secret_resource(self, resource_desc: ResourceDesc, data: bytes) -> None:
        """Store the bytes of a resource."""


@dataclass
class LocalFsRepoDesc:
    dir_path: str | None = DEFAULT_REPO_DIR_PATH


class LocalFs(Repository):
    """A repository kept in a directory tree on the local file system."""

    def __init__(self, repo_desc: LocalFsRepoDesc | None = None) -> None:
        repo_desc = repo_desc or LocalFsRepoDesc()
        self.repo_dir_path = repo_desc.dir_path or DEFAULT_REPO_DIR_PATH

    def read_secret_resource(self, resource_desc: ResourceDesc) -> bytes:
        return (Path(self.repo_dir_path) / str(resource_desc)).read_bytes()

    def write_secret_resource(self, resource_desc: ResourceDesc, data: bytes) -> None:
        directory = Path(self.repo_dir_path) / resource_desc.repository_name / resource_desc.resource_type
        directory.mkdir(parents=True, exist_ok=True)
        (directory / resource_desc.resource_tag).write_bytes(data)


@dataclass
class RepositoryConfig:
    """Repository configuration, selected by ``type``."""

    type: str = LOCAL_FS_TYPE
    dir_path: str | None = DEFAULT_REPO_DIR_PATH

    def initialize(self) -> Repository:
        """Create the repository's directories and return the repository."""
        if self.type != LOCAL_FS_TYPE:
            raise ValueError(f"unknown repository type: {self.type}")
        dir_path = Path(self.dir_path or DEFAULT_REPO_DIR_PATH)
        (dir_path / DEFAULT_REPOSITORY_NAME).mkdir(parents=True, exist_ok=True)
        return LocalFs(LocalFsRepoDesc(dir_path=str(dir_path)))


def resource_desc_from_params(params: Mapping[str, str]) -> ResourceDesc:
    """Build a description from URL path parameters ``repository``, ``type`` and ``tag``."""
    if "type" not in params:
        raise InvalidRequest("no `type` in url")
    if "tag" not in params:
        raise InvalidRequest("no `tag` in url")
    return ResourceDesc(
        repository_name=params.get("repository", DEFAULT_REPOSITORY_NAME),
        resource_type=params["type"],
        resource_tag=params["tag"],
    )


def set_secret_resource(repository: Repository, resource_desc: ResourceDesc, data: bytes) -> None:
    repository.write_secret_resource(resource_desc, data)