"""Domain entity for vendors that supply price lists."""

from dataclasses import dataclass


@dataclass
class Vendor:
    id: int | None
    name: str
    code: str | None
    is_active: bool


__all__ = ["Vendor"]
