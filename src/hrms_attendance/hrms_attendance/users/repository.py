from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Read-only roster interface used by the attendance services."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def list_active_employee_ids(self) -> Sequence[int]:
        raise NotImplementedError
