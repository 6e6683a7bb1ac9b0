from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee owned by the surrounding HR application."""

    user_id: int
    full_name: str
    username: str
    role: Role
    is_active: bool = True
