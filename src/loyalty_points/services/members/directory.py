"""Member directory port and in-memory adapter."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Protocol
from uuid import UUID

from loyalty_points.domain.errors import MemberNotFoundError
from loyalty_points.domain.time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class DirectoryMember:
    """Read-only member record supplied by the directory."""

    member_id: UUID
    active_member: bool
    membership_since: datetime

    def __post_init__(self) -> None:
        require_utc_timestamp("membership_since", self.membership_since)


class MemberDirectory(Protocol):
    """Lookup port for the external member directory."""

    async def get_member(self, member_id: UUID) -> DirectoryMember:
        """Return the directory record or raise ``MemberNotFoundError``."""


class InMemoryMemberDirectory:
    """Dictionary-backed directory for development and tests."""

    def __init__(self, members: Iterable[DirectoryMember] = ()) -> None:
        self._members: Dict[UUID, DirectoryMember] = {}
        for member in members:
            self.add(member)

    def add(self, member: DirectoryMember) -> None:
        self._members[member.member_id] = member

    async def get_member(self, member_id: UUID) -> DirectoryMember:
        try:
            return self._members[member_id]
        except KeyError:
            raise MemberNotFoundError(member_id) from None


__all__ = ["DirectoryMember", "InMemoryMemberDirectory", "MemberDirectory"]
