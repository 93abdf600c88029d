from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .model import SalaryStructure


class SalaryStructureRepository(Protocol):
    def get_by_user(self, user_id: int) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def get_by_users(self, user_ids: Sequence[int]) -> Mapping[int, SalaryStructure]:
        raise NotImplementedError

    def upsert(self, structure: SalaryStructure) -> int:
        """Insert or replace the structure of ``structure.user_id``; returns the row id."""

        raise NotImplementedError
