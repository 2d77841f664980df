"""
Core data structures for request handling.

Provides:
- MultiDict: Multi-value dictionary for query params
- Headers: Case-insensitive header access
- parse_cookie_header: Cookie header parsing helper
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Dict, Iterator, List, Mapping, MutableMapping, Optional, Tuple, Union
)


# ============================================================================
# MultiDict
# ============================================================================

class MultiDict(MutableMapping[str, List[str]]):
    """
    Dictionary that supports multiple values per key.

    ``get`` returns the first value; ``get_all`` returns every value.
    """

    def __init__(self, items: Optional[Union[List[Tuple[str, str]], Mapping[str, Union[str, List[str]]]]] = None):
        self._data: Dict[str, List[str]] = {}

        if items:
            if isinstance(items, list):
                for key, value in items:
                    self.add(key, value)
            else:
                for key, value in items.items():
                    if isinstance(value, list):
                        self._data[key] = list(value)
                    else:
                        self._data[key] = [value]

    def __getitem__(self, key: str) -> List[str]:
        return self._data[key]

    def __setitem__(self, key: str, value: Union[str, List[str]]) -> None:
        self._data[key] = list(value) if isinstance(value, list) else [value]

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MultiDict({dict(self._data)})"

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get first value for a key."""
        values = self._data.get(key)
        return values[0] if values else default

    def get_all(self, key: str) -> List[str]:
        """Get all values for a key."""
        return list(self._data.get(key, []))

    def add(self, key: str, value: str) -> None:
        """Add a value to a key (appends to list)."""
        self._data.setdefault(key, []).append(value)

    def to_dict(self, multi: bool = False) -> Dict[str, Union[str, List[str]]]:
        """
        Convert to regular dict.

        Args:
            multi: If True, return lists for all keys.
                   If False, return lists only for repeated keys.
        """
        if multi:
            return {k: list(v) for k, v in self._data.items()}
        return {k: v[0] if len(v) == 1 else list(v) for k, v in self._data.items() if v}


# ============================================================================
# Headers
# ============================================================================

@dataclass
class Headers:
    """
    Case-insensitive header access with raw preservation.

    Built from ASGI-style ``(name, value)`` byte pairs.
    """

    raw: List[Tuple[bytes, bytes]] = field(default_factory=list)
    _index: Dict[str, List[bytes]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._index = {}
        for name, value in self.raw:
            self._index.setdefault(name.decode("latin-1").lower(), []).append(value)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, str]]) -> "Headers":
        raw = [
            (name.encode("latin-1"), str(value).encode("latin-1"))
            for name, value in (mapping or {}).items()
        ]
        return cls(raw=raw)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get first value for header (case-insensitive)."""
        values = self._index.get(name.lower())
        if values:
            return values[0].decode("latin-1")
        return default

    def get_all(self, name: str) -> List[str]:
        return [value.decode("latin-1") for value in self._index.get(name.lower(), [])]

    def items(self) -> Iterator[Tuple[str, str]]:
        for name, value in self.raw:
            yield name.decode("latin-1"), value.decode("latin-1")

    def to_dict(self) -> Dict[str, str]:
        """Lower-cased names mapped to their first value."""
        return {name: values[0].decode("latin-1") for name, values in self._index.items()}

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._index

    def __getitem__(self, name: str) -> str:
        value = self.get(name)
        if value is None:
            raise KeyError(f"Header '{name}' not found")
        return value

    def __repr__(self) -> str:
        return f"Headers({list(self.items())})"


# ============================================================================
# Cookies
# ============================================================================

def parse_cookie_header(value: Optional[str]) -> Dict[str, str]:
    """
    Parse a ``Cookie`` header into a dict.

    Malformed pairs are skipped; the first occurrence of a name wins.
    """
    cookies: Dict[str, str] = {}
    if not value:
        return cookies

    for chunk in value.split(";"):
        if "=" not in chunk:
            continue
        name, _, val = chunk.partition("=")
        name = name.strip()
        val = val.strip()
        if len(val) >= 2 and val[0] == val[-1] == '"':
            val = val[1:-1]
        if name and name not in cookies:
            cookies[name] = val
    return cookies
