"""
Process definition resource carrying the authorization rule-set.

Only the parts the authorization core needs are modelled: canonical url, version and the
top-level extensions. Other resource content is kept as ``extra`` so a document loaded and
dumped again keeps its fields.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Optional, Tuple

from ..tree import Extension
from ..types.errors import ResourceFormatError
from ..authz.codes import EXTENSION_PROCESS_AUTHORIZATION


RESOURCE_TYPE = "ActivityDefinition"


@dataclass(frozen=True)
class ProcessDefinition:
    """
    Process definition metadata resource (FHIR ActivityDefinition).

    Instances are immutable; updates return new values.
    """
    url: Optional[str] = None
    version: Optional[str] = None
    extension: Tuple[Extension, ...] = ()
    name: Optional[str] = None
    status: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'extension', tuple(self.extension) if self.extension else ())

    def authorization_extensions(self) -> Iterator[Extension]:
        """The process authorization blocks, in document order."""
        return (e for e in self.extension if e.url == EXTENSION_PROCESS_AUTHORIZATION)

    def with_extension(self, *extensions: Extension) -> 'ProcessDefinition':
        return replace(self, extension=self.extension + tuple(extensions))

    def replace_extension(self, old: Extension, new: Extension) -> 'ProcessDefinition':
        """Replace the first extension identical to ``old`` (compared by identity, then equality)."""
        index = next((i for i, e in enumerate(self.extension) if e is old), None)
        if index is None:
            index = next((i for i, e in enumerate(self.extension) if e == old), None)
        if index is None:
            raise ValueError("extension to replace not found")

        extensions = list(self.extension)
        extensions[index] = new
        return replace(self, extension=tuple(extensions))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to FHIR-JSON dictionary representation."""
        result: Dict[str, Any] = {'resourceType': RESOURCE_TYPE}
        if self.extension:
            result['extension'] = [e.to_dict() for e in self.extension]
        if self.url is not None:
            result['url'] = self.url
        if self.version is not None:
            result['version'] = self.version
        if self.name is not None:
            result['name'] = self.name
        if self.status is not None:
            result['status'] = self.status
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProcessDefinition':
        """Create from FHIR-JSON dictionary representation."""
        if not isinstance(data, dict):
            raise ResourceFormatError(f"Resource must be a JSON object, got {type(data).__name__}")

        resource_type = data.get('resourceType')
        if resource_type != RESOURCE_TYPE:
            raise ResourceFormatError(f"Unexpected resourceType {resource_type!r}, expected {RESOURCE_TYPE}")

        known = ('resourceType', 'extension', 'url', 'version', 'name', 'status')
        return cls(
            url=data.get('url'),
            version=data.get('version'),
            extension=Extension.list_from(data.get('extension')),
            name=data.get('name'),
            status=data.get('status'),
            extra={k: v for k, v in data.items() if k not in known},
        )
