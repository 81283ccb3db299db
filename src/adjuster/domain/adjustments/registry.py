"""Explicit mapping between subject type tags and host classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, overload

from adjuster.domain.adjustments.errors import SubjectResolutionError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from adjuster.domain.model import Adjustable


class SubjectRegistry:
    """Type tag -> subject class lookup used to resolve a changeset's owner.

    Built once at startup. ``resolve(None)`` returns the only registered class,
    which is how single-type (non-polymorphic) stores find their subject kind.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[Adjustable]] = {}

    @overload
    def register[TSubject: Adjustable](
        self, cls: type[TSubject], *, tag: str | None = None
    ) -> type[TSubject]: ...

    @overload
    def register[TSubject: Adjustable](
        self, cls: None = None, *, tag: str | None = None
    ) -> Callable[[type[TSubject]], type[TSubject]]: ...

    def register[TSubject: Adjustable](
        self, cls: type[TSubject] | None = None, *, tag: str | None = None
    ) -> type[TSubject] | Callable[[type[TSubject]], type[TSubject]]:
        """Register ``cls`` under ``tag`` (default: its ``ADJUSTABLE_TYPE``).

        Usable directly or as a class decorator.
        """

        def decorator(subject_cls: type[TSubject]) -> type[TSubject]:
            resolved_tag = tag or _default_tag(subject_cls)
            existing = self._classes.get(resolved_tag)
            if existing is not None and existing is not subject_cls:
                raise ValueError(
                    f"Subject type {resolved_tag!r} already registered for {existing.__name__}"
                )
            self._classes[resolved_tag] = subject_cls
            return subject_cls

        if cls is None:
            return decorator
        return decorator(cls)

    def tag_for(self, subject: Adjustable | type[Adjustable]) -> str:
        subject_cls = subject if isinstance(subject, type) else type(subject)
        for tag, cls in self._classes.items():
            if cls is subject_cls:
                return tag
        raise SubjectResolutionError(f"{subject_cls.__name__} is not a registered subject")

    def resolve(self, tag: str | None) -> type[Adjustable]:
        if tag is None:
            if len(self._classes) != 1:
                raise SubjectResolutionError(
                    "Untyped changesets need exactly one registered subject class"
                )
            return next(iter(self._classes.values()))
        try:
            return self._classes[tag]
        except KeyError:
            raise SubjectResolutionError(f"Unknown subject type: {tag!r}") from None

    def __contains__(self, tag: object) -> bool:
        return tag in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)


def _default_tag(cls: type[Adjustable]) -> str:
    explicit = getattr(cls, "ADJUSTABLE_TYPE", None)
    if isinstance(explicit, str) and explicit:
        return explicit
    return cls.__name__.lower()
