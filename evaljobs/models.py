"""Core data models shared across evaljobs components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

DEFAULT_SCHEDULING_PRIORITY = 100
DEFAULT_TIMEOUT = 36000
DEFAULT_MAX_SILENT = 7200


@dataclass(frozen=True)
class AttrPath:
    """Dotted attribute path addressing a node of the job tree."""

    segments: Tuple[str, ...] = ()

    @classmethod
    def root(cls) -> "AttrPath":
        return cls(())

    def child(self, name: str) -> "AttrPath":
        return AttrPath(self.segments + (name,))

    @property
    def dotted(self) -> str:
        return ".".join(self.segments)

    def __str__(self) -> str:
        return self.dotted


@dataclass(frozen=True)
class JobDescriptor:
    """Everything the scheduler needs to know about one job."""

    nix_name: str
    system: str
    drv_path: str
    description: str = ""
    license: str = ""
    homepage: str = ""
    maintainers: str = ""
    scheduling_priority: int = DEFAULT_SCHEDULING_PRIORITY
    timeout: int = DEFAULT_TIMEOUT
    max_silent: int = DEFAULT_MAX_SILENT
    is_channel: bool = False
    constituents: Optional[str] = None
    outputs: Dict[str, str] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "nixName": self.nix_name,
            "system": self.system,
            "drvPath": self.drv_path,
            "description": self.description,
            "license": self.license,
            "homepage": self.homepage,
            "maintainers": self.maintainers,
            "schedulingPriority": self.scheduling_priority,
            "timeout": self.timeout,
            "maxSilent": self.max_silent,
            "isChannel": self.is_channel,
        }
        if self.constituents is not None:
            payload["constituents"] = self.constituents
        payload["outputs"] = dict(self.outputs)
        return payload


@dataclass(frozen=True)
class ErrorDescriptor:
    """A recoverable failure recorded in place of a job or namespace."""

    message: str

    def to_json(self) -> Dict[str, Any]:
        return {"error": self.message}


Descriptor = Union[JobDescriptor, ErrorDescriptor]


@dataclass(frozen=True)
class Entry:
    """A descriptor together with the path it is recorded under."""

    path: AttrPath
    descriptor: Descriptor
