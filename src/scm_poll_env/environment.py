"""
Environment variable mapping used to build poll environments.

The mapping keeps insertion order, rejects null values and knows how to
merge contributions under an explicit policy and how to expand
``${VAR}``/``$VAR`` references against itself.
"""

import os
import re
from collections.abc import Iterator, Mapping, MutableMapping
from enum import Enum

_REFERENCE = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_.]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)


class MergePolicy(str, Enum):
    """How a contribution treats keys that are already present."""

    OVERRIDE_ALWAYS = "override_always"
    OVERRIDE_IF_ABSENT = "override_if_absent"


class Environment(MutableMapping[str, str]):
    """Ordered ``name -> value`` mapping of environment variables."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._vars: dict[str, str] = {}
        if initial:
            for key, value in initial.items():
                self.put(key, value)

    def __getitem__(self, key: str) -> str:
        return self._vars[key]

    def __setitem__(self, key: str, value: str) -> None:
        self.put(key, value)

    def __delitem__(self, key: str) -> None:
        del self._vars[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"Environment({self._vars!r})"

    def put(self, key: str, value: str) -> None:
        """Set ``key`` to ``value``; null values are not allowed."""
        if key is None:
            raise ValueError("Environment variable name must not be None")
        if value is None:
            raise ValueError(f"Environment variable {key!r} must not be None")
        self._vars[key] = str(value)

    def override(
        self,
        key: str,
        value: str | None,
        policy: MergePolicy = MergePolicy.OVERRIDE_ALWAYS,
    ) -> None:
        """
        Apply a single contribution.

        Args:
            key: Variable name. ``NAME+SUFFIX`` prepends to ``NAME``.
            value: New value. ``None`` or empty removes the variable when
                overriding; when filling gaps only ``None`` is skipped and an
                empty value is set
            policy: Whether existing values may be replaced
        """
        real_key = key.split("+", 1)[0] if "+" in key else key

        if policy is MergePolicy.OVERRIDE_IF_ABSENT:
            if real_key in self._vars or value is None:
                return
            self.put(real_key, value)
            return

        if value is None or value == "":
            self._vars.pop(real_key, None)
            return

        if real_key != key and self._vars.get(real_key):
            value = f"{value}{os.pathsep}{self._vars[real_key]}"

        self.put(real_key, value)

    def override_all(
        self,
        variables: Mapping[str, str | None],
        policy: MergePolicy = MergePolicy.OVERRIDE_ALWAYS,
    ) -> "Environment":
        """Apply every entry of ``variables`` in order and return self."""
        for key, value in variables.items():
            self.override(key, value, policy)
        return self

    def merge(
        self,
        other: "Environment",
        policy: MergePolicy = MergePolicy.OVERRIDE_ALWAYS,
    ) -> "Environment":
        """Merge another environment into this one."""
        return self.override_all(other, policy)

    def expand(self, text: str) -> str:
        """Expand variable references in ``text`` using current values."""

        def _substitute(match: re.Match[str]) -> str:
            name = match.group("braced") or match.group("bare")
            return self._vars.get(name, match.group(0))

        return _REFERENCE.sub(_substitute, text)

    def resolve(self) -> "Environment":
        """
        Expand references between variables in place.

        References are followed transitively. Unknown names and references
        that would close a cycle are kept verbatim.

        Returns:
            This environment, for chaining
        """
        resolved: dict[str, str] = {}

        def _resolve_key(key: str, visiting: set[str]) -> str:
            if key in resolved:
                return resolved[key]
            visiting.add(key)

            def _substitute(match: re.Match[str]) -> str:
                name = match.group("braced") or match.group("bare")
                if name not in self._vars or name in visiting:
                    return match.group(0)
                return _resolve_key(name, visiting)

            value = _REFERENCE.sub(_substitute, self._vars[key])
            visiting.discard(key)
            resolved[key] = value
            return value

        for key in list(self._vars):
            _resolve_key(key, set())

        self._vars = {key: resolved[key] for key in self._vars}
        return self

    def copy(self) -> "Environment":
        """Return a shallow copy."""
        return Environment(self._vars)

    def to_dict(self) -> dict[str, str]:
        """Return the variables as a plain dictionary."""
        return dict(self._vars)
