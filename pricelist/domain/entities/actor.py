"""Domain entity describing the authenticated caller."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Actor:
    """Identity resolved from a bearer token issued by the identity service."""

    id: int
    email: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


__all__ = ["Actor"]
