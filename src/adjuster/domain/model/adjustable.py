"""Capability surface a host record exposes to the adjustment engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from adjuster.domain.model.entity import Entity

if TYPE_CHECKING:
    from collections.abc import Iterable
    from dataclasses import Field


@runtime_checkable
class Adjustable(Protocol):
    """Identity, field access and the transient adjusted state of a subject."""

    @property
    def adjustable_id(self) -> str: ...

    @property
    def adjustable_type(self) -> str: ...

    @property
    def is_adjusted(self) -> bool: ...

    @property
    def save_protection(self) -> bool | None: ...

    def adjustable_fields(self) -> frozenset[str]: ...

    def has_field(self, name: str) -> bool: ...

    def get_field(self, name: str) -> object: ...

    def set_field(self, name: str, value: object) -> None: ...

    def mark_adjusted(self) -> None: ...

    def clear_adjusted(self) -> None: ...


@dataclass(eq=False, kw_only=True)
class AdjustableMixin(Entity):
    """Capability: a dataclass entity whose public fields can be adjusted.

    ``ADJUSTABLE_TYPE`` is the discriminator stored next to the subject id;
    it defaults to the lower-cased class name. ``ADJUSTABLE_FIELDS`` optionally
    narrows which fields accept adjustments. ``SAVE_PROTECTION`` is a class-wide
    override of the global save protection setting, itself overridable per
    instance through :attr:`save_protection`.
    """

    ADJUSTABLE_TYPE: ClassVar[str | None] = None
    ADJUSTABLE_FIELDS: ClassVar[frozenset[str] | None] = None
    SAVE_PROTECTION: ClassVar[bool | None] = None

    _adjusted: bool = field(default=False, init=False, repr=False)
    _save_protection: bool | None = field(default=None, init=False, repr=False)

    @property
    def adjustable_id(self) -> str:
        return str(self.id)

    @property
    def adjustable_type(self) -> str:
        return self.ADJUSTABLE_TYPE or type(self).__name__.lower()

    @property
    def is_adjusted(self) -> bool:
        return self._adjusted

    @property
    def save_protection(self) -> bool | None:
        if self._save_protection is not None:
            return self._save_protection
        return self.SAVE_PROTECTION

    @save_protection.setter
    def save_protection(self, value: bool | None) -> None:
        self._save_protection = value

    def adjustable_fields(self) -> frozenset[str]:
        names = _public_field_names(fields(self))
        if self.ADJUSTABLE_FIELDS is not None:
            return names & self.ADJUSTABLE_FIELDS
        return names

    def has_field(self, name: str) -> bool:
        return name in self.adjustable_fields()

    def get_field(self, name: str) -> object:
        if not self.has_field(name):
            raise KeyError(name)
        return getattr(self, name)

    def set_field(self, name: str, value: object) -> None:
        if not self.has_field(name):
            raise KeyError(name)
        setattr(self, name, value)

    # Friend primitives (called only by the adjustment engine / persistence hooks)
    def mark_adjusted(self) -> None:
        self._adjusted = True

    def clear_adjusted(self) -> None:
        self._adjusted = False


def _public_field_names(declared: Iterable[Field[object]]) -> frozenset[str]:
    return frozenset(
        item.name for item in declared if item.name != "id" and not item.name.startswith("_")
    )
