"""
Immutable extension-tree value types.

Process authorization rules are stored as nested extensions on a process definition resource.
Every node is a frozen dataclass; building a tree never mutates an existing node, updates return
new values instead.

The FHIR-JSON codec (``to_dict``/``from_dict``) reproduces the shape used by rule-author tooling::

    {"url": "...", "valueCoding": {"system": "...", "code": "...", "extension": [...]}}
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..types.errors import ResourceFormatError


def _as_tuple(children: Optional[Iterable['Extension']]) -> Tuple['Extension', ...]:
    return tuple(children) if children else ()


def _has_text(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(value)


class Canonical(str):
    """A canonical URL value (``valueCanonical``), e.g. ``http://foo/Task/bar|1.0``."""

    __slots__ = ()

    @property
    def base(self) -> str:
        """The URL without its ``|version`` suffix."""
        return self.split('|', 1)[0]

    def __repr__(self) -> str:
        return f"Canonical({str.__repr__(self)})"


@dataclass(frozen=True)
class Identifier:
    """A (system, value) business identifier."""
    system: Optional[str] = None
    value: Optional[str] = None

    def has_system(self) -> bool:
        return _has_text(self.system)

    def has_value(self) -> bool:
        return _has_text(self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {}
        if self.system is not None:
            result['system'] = self.system
        if self.value is not None:
            result['value'] = self.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Identifier':
        """Create from dictionary representation."""
        _require_object(data, 'Identifier')
        return cls(system=data.get('system'), value=data.get('value'))


@dataclass(frozen=True)
class Coding:
    """
    A (system, code) classification pair.

    A classification coding may carry child extensions; the process authorization codes use them
    to hold the organization, role and practitioner sub-nodes of a rule.
    """
    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = field(default=None, compare=False)
    extension: Tuple['Extension', ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'extension', _as_tuple(self.extension))

    def has_system(self) -> bool:
        return _has_text(self.system)

    def has_code(self) -> bool:
        return _has_text(self.code)

    def has_extension(self) -> bool:
        return bool(self.extension)

    def same_as(self, other: Optional['Coding']) -> bool:
        """Compare system and code only, ignoring display and child extensions."""
        return other is not None and self.system == other.system and self.code == other.code

    def with_extension(self, *children: 'Extension') -> 'Coding':
        return replace(self, extension=self.extension + tuple(children))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result: Dict[str, Any] = {}
        if self.extension:
            result['extension'] = [e.to_dict() for e in self.extension]
        if self.system is not None:
            result['system'] = self.system
        if self.code is not None:
            result['code'] = self.code
        if self.display is not None:
            result['display'] = self.display
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Coding':
        """Create from dictionary representation."""
        _require_object(data, 'Coding')
        return cls(
            system=data.get('system'),
            code=data.get('code'),
            display=data.get('display'),
            extension=Extension.list_from(data.get('extension'))
        )


ExtensionValue = Union[str, Canonical, Coding, Identifier]

# value[x] JSON keys, checked in order; Canonical before str since it is a str subclass
_VALUE_KEYS = (
    ('valueCanonical', Canonical),
    ('valueString', str),
    ('valueCoding', Coding),
    ('valueIdentifier', Identifier),
)


@dataclass(frozen=True)
class Extension:
    """A named node: URL, optional typed value, ordered child extensions."""
    url: Optional[str] = None
    value: Optional[ExtensionValue] = None
    extension: Tuple['Extension', ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'extension', _as_tuple(self.extension))

    def has_url(self) -> bool:
        return _has_text(self.url)

    def has_value(self) -> bool:
        return self.value is not None

    def has_extension(self) -> bool:
        return bool(self.extension)

    def children_with_url(self, url: str) -> List['Extension']:
        return [e for e in self.extension if e.url == url]

    def with_extension(self, *children: 'Extension') -> 'Extension':
        return replace(self, extension=self.extension + tuple(children))

    def string_value(self) -> Optional[str]:
        """The value if it is a plain string (``valueString``), else None."""
        if isinstance(self.value, str) and not isinstance(self.value, Canonical):
            return self.value
        return None

    def canonical_value(self) -> Optional[Canonical]:
        """The value if it is a canonical URL (``valueCanonical``), else None."""
        return self.value if isinstance(self.value, Canonical) else None

    def coding_value(self) -> Optional[Coding]:
        return self.value if isinstance(self.value, Coding) else None

    def identifier_value(self) -> Optional[Identifier]:
        return self.value if isinstance(self.value, Identifier) else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result: Dict[str, Any] = {}
        if self.extension:
            result['extension'] = [e.to_dict() for e in self.extension]
        if self.url is not None:
            result['url'] = self.url

        for key, value_type in _VALUE_KEYS:
            if isinstance(self.value, value_type):
                if value_type in (Coding, Identifier):
                    result[key] = self.value.to_dict()
                else:
                    result[key] = str(self.value)
                break

        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Extension':
        """Create from dictionary representation."""
        _require_object(data, 'Extension')

        value_keys = [k for k in data if k.startswith('value')]
        if len(value_keys) > 1:
            raise ResourceFormatError(f"Extension has more than one value: {', '.join(sorted(value_keys))}")

        value: Optional[ExtensionValue] = None
        if value_keys:
            key = value_keys[0]
            raw = data[key]
            if key in ('valueString', 'valueCanonical') and not isinstance(raw, str):
                raise ResourceFormatError(f"{key} must be a string, got {type(raw).__name__}")
            if key == 'valueString':
                value = raw
            elif key == 'valueCanonical':
                value = Canonical(raw)
            elif key == 'valueCoding':
                value = Coding.from_dict(raw)
            elif key == 'valueIdentifier':
                value = Identifier.from_dict(raw)
            else:
                raise ResourceFormatError(f"Unsupported extension value type: {key}")

        return cls(url=data.get('url'), value=value, extension=cls.list_from(data.get('extension')))

    @classmethod
    def list_from(cls, data: Optional[List[Dict[str, Any]]]) -> Tuple['Extension', ...]:
        """Parse an optional JSON ``extension`` array."""
        if data is None:
            return ()
        if not isinstance(data, list):
            raise ResourceFormatError("extension must be a list")
        return tuple(cls.from_dict(item) for item in data)


def _require_object(data: Any, type_name: str) -> None:
    if not isinstance(data, dict):
        raise ResourceFormatError(f"{type_name} must be a JSON object, got {type(data).__name__}")
