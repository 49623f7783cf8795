"""Named numeric parameters shared between the reweighters."""

from __future__ import annotations

from collections.abc import Iterator


class NoParameterFound(LookupError):
    """Raised when a parameter is requested that the table does not hold."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"no parameter named {self.name!r}"


class ParameterTable:
    """A mapping of parameter names to values, iterated in name order."""

    def __init__(self, values: dict[str, float] | None = None) -> None:
        self._table: dict[str, float] = {}
        if values:
            for name, value in values.items():
                self.set_parameter(name, value)

    def set_parameter(self, name: str, value: float) -> None:
        """Set a parameter, replacing any earlier value under the same name."""
        self._table[name] = float(value)

    def get_parameter(self, name: str) -> tuple[str, float]:
        """Return the ``(name, value)`` pair for ``name``."""
        return name, self.get_value(name)

    def get_value(self, name: str) -> float:
        """Return the value stored under ``name``."""
        try:
            return self._table[name]
        except KeyError:
            raise NoParameterFound(name) from None

    def has_parameter(self, name: str) -> bool:
        return name in self._table

    def items(self) -> list[tuple[str, float]]:
        """All ``(name, value)`` pairs, sorted by name."""
        return sorted(self._table.items())

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._table))

    def __repr__(self) -> str:
        return f"ParameterTable({dict(self.items())!r})"