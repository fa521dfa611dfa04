from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Employee roster entry as seen by the attendance engine.

    Note: profile/credential fields belong to the employee module and are not loaded here.
    """

    user_id: int
    full_name: str
    role: Role
    dept_id: Optional[int]
    shift_id: Optional[int]
    email: Optional[str] = None
    is_active: bool = True
