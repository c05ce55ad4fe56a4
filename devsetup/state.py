"""Data model shared by the provisioning steps."""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional


class HostPlatform(str, Enum):
    """Closed set of host platforms the installer distinguishes."""

    LINUX = "linux"
    MACOS = "macos"
    OTHER = "other"

    @classmethod
    def from_system(cls, system: str) -> "HostPlatform":
        """Map a ``platform.system()`` value onto the enumeration."""
        mapping = {"Linux": cls.LINUX, "Darwin": cls.MACOS}
        return mapping.get(system, cls.OTHER)


@dataclass(frozen=True)
class ToolStatus:
    """Result of resolving a single tool on PATH."""

    name: str
    present: bool
    version: Optional[str] = None
    command: Optional[str] = None
    mandatory: bool = True
    hint: str = ""


@dataclass(frozen=True)
class PrerequisiteReport:
    """Read-only mapping from tool name to its status."""

    tools: dict[str, ToolStatus] = field(default_factory=dict)

    def __getitem__(self, name: str) -> ToolStatus:
        return self.tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self.tools

    def is_present(self, name: str) -> bool:
        status = self.tools.get(name)
        return bool(status and status.present)

    def missing_mandatory(self) -> list[ToolStatus]:
        return [s for s in self.tools.values() if s.mandatory and not s.present]

    def with_tool(self, status: ToolStatus) -> "PrerequisiteReport":
        """Return a new report with ``status`` replacing the entry of the same name."""
        tools = dict(self.tools)
        tools[status.name] = status
        return PrerequisiteReport(tools)


class CredentialSource(str, Enum):
    ENVIRONMENT = "environment"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class ProviderCredential:
    key: str
    source: CredentialSource

    def __repr__(self) -> str:
        return f"ProviderCredential(key='***', source={self.source.value!r})"


class EndpointKind(str, Enum):
    LOCAL_INFERENCE = "local_inference"
    REMOTE_API = "remote_api"


@dataclass(frozen=True)
class ServiceEndpoint:
    url: str
    kind: EndpointKind
    reachable: Optional[bool] = None
    detail: str = ""


class JobStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ModelDownloadJob:
    name: str
    status: JobStatus = JobStatus.PENDING


@dataclass(frozen=True)
class PipelineState:
    """Value threaded through every provisioning step.

    Steps never mutate it; they return an updated copy via :meth:`evolve`.
    """

    platform: HostPlatform
    report: PrerequisiteReport = field(default_factory=PrerequisiteReport)
    credential: Optional[ProviderCredential] = None
    runtime_installed: bool = False
    service_running: bool = False
    config_path: Optional[Path] = None
    launchers: tuple[Path, ...] = ()
    model_jobs: tuple[ModelDownloadJob, ...] = ()
    endpoints: tuple[ServiceEndpoint, ...] = ()
    warnings: tuple[str, ...] = ()

    def evolve(self, **changes) -> "PipelineState":
        return replace(self, **changes)

    def warn(self, message: str) -> "PipelineState":
        return replace(self, warnings=self.warnings + (message,))
