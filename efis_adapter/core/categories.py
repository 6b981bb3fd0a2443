"""Category profiles and the resolver that validates incoming identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Protocol

from .errors import CategoryDisabled, ConfigError, UnknownCategory


@dataclass(frozen=True)
class Category:
    """Configuration profile selecting the data scope of a readout request."""

    id: str
    valid: bool = True
    label: str = ""

    @classmethod
    def from_mapping(cls, category_id: str, data: Mapping[str, object] | None) -> "Category":
        data = data or {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"category '{category_id}' must be a mapping")
        unknown = set(data) - {"valid", "label"}
        if unknown:
            raise ConfigError(
                f"category '{category_id}' has unknown keys: {', '.join(sorted(unknown))}"
            )
        valid = data.get("valid", True)
        if not isinstance(valid, bool):
            raise ConfigError(f"category '{category_id}' valid flag must be a boolean")
        return cls(id=category_id, valid=valid, label=str(data.get("label", "")))


def build_categories(data: Mapping[str, object]) -> Dict[str, Category]:
    """Build :class:`Category` objects from the ``categories`` config mapping."""

    categories: Dict[str, Category] = {}
    for key, entry in data.items():
        category_id = str(key)
        if not category_id.strip():
            raise ConfigError("category identifiers cannot be blank")
        categories[category_id] = Category.from_mapping(category_id, entry)  # type: ignore[arg-type]
    return categories


class CategoryLookup(Protocol):
    """Capability returning a configured category or ``None``."""

    def get(self, category_id: str) -> Optional[Category]:  # pragma: no cover - protocol signature
        ...

    def available(self) -> list[str]:  # pragma: no cover - protocol signature
        ...


class CategoryTable:
    """Category table frozen at construction time.

    Lookups are plain reads of a :class:`types.MappingProxyType`, safe to
    perform from concurrent requests without locking.
    """

    def __init__(self, categories: Mapping[str, Category]) -> None:
        self._categories: Mapping[str, Category] = MappingProxyType(dict(categories))

    def get(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def available(self) -> list[str]:
        return sorted(cid for cid, category in self._categories.items() if category.valid)


class CategoryResolver:
    """Resolve category identifiers through a :class:`CategoryLookup`."""

    def __init__(self, lookup: CategoryLookup) -> None:
        self._lookup = lookup

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "CategoryResolver":
        return cls(CategoryTable(build_categories(data)))

    def available(self) -> list[str]:
        return self._lookup.available()

    def resolve(self, category_id: str) -> Category:
        """Return the category for *category_id*.

        Raises :class:`UnknownCategory` when the identifier is not configured
        and :class:`CategoryDisabled` when it is configured but not valid.
        There is no default profile.
        """

        category = self._lookup.get(category_id)
        if category is None:
            raise UnknownCategory(category_id, self.available())
        if not category.valid:
            raise CategoryDisabled(category_id)
        return category
