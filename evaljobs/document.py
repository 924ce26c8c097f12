"""Path-keyed result document produced by a discovery run."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator

from .errors import EvalJobsError
from .models import AttrPath, Descriptor, Entry, ErrorDescriptor, JobDescriptor


class DuplicatePathError(EvalJobsError):
    """Raised when two descriptors are recorded for the same attribute path."""


class ResultDocument:
    """Append-only mapping from attribute path to job or error descriptor.

    Only complete descriptors are ever recorded, so an error at a path can
    never be mixed with fields of a job that failed half way through.
    """

    def __init__(self) -> None:
        self._entries: Dict[AttrPath, Descriptor] = {}

    def add(self, path: AttrPath, descriptor: Descriptor) -> None:
        if path in self._entries:
            raise DuplicatePathError(f"attribute path `{path.dotted}' recorded twice")
        self._entries[path] = descriptor

    def add_job(self, path: AttrPath, job: JobDescriptor) -> None:
        self.add(path, job)

    def add_error(self, path: AttrPath, message: str) -> None:
        self.add(path, ErrorDescriptor(message))

    def extend(self, entries: Iterable[Entry]) -> None:
        for entry in entries:
            self.add(entry.path, entry.descriptor)

    def get(self, path: AttrPath) -> Descriptor | None:
        return self._entries.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        for path, descriptor in self._entries.items():
            yield Entry(path, descriptor)

    def to_json(self, *, nested: bool = False) -> Dict[str, Any]:
        """Render the document, flat by dotted path or nested by segment."""
        if not nested:
            return {path.dotted: descriptor.to_json() for path, descriptor in self._entries.items()}

        result: Dict[str, Any] = {}
        for path, descriptor in self._entries.items():
            if not path.segments:
                # The root itself was a job or failed; nothing else can exist.
                return {"": descriptor.to_json()}
            node = result
            for segment in path.segments[:-1]:
                node = node.setdefault(segment, {})
            node[path.segments[-1]] = descriptor.to_json()
        return result


__all__ = ["DuplicatePathError", "ResultDocument"]
