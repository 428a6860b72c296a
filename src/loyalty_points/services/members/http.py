"""HTTP-backed member directory adapter."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from loyalty_points.domain.errors import DirectoryAdapterError, MemberNotFoundError

from .directory import DirectoryMember


class DirectoryMemberPayload(BaseModel):
    memberId: UUID
    activeMember: bool
    membershipSince: datetime


class HttpMemberDirectory:
    """Fetches members from the directory service via ``GET /members/{id}``."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Member directory base URL must be configured")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=self._headers(), timeout=self._timeout_seconds)
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await client.get(url, headers=self._headers())

    async def get_member(self, member_id: UUID) -> DirectoryMember:
        url = f"{self._base_url}/members/{member_id}"
        try:
            response = await self._get(url)
        except httpx.HTTPError as exc:
            logger.warning("member_directory.http.failed", member_id=str(member_id), error=str(exc))
            raise DirectoryAdapterError(f"request to member directory failed: {exc}") from exc

        if response.status_code == 404:
            raise MemberNotFoundError(member_id)
        if response.status_code != 200:
            logger.warning(
                "member_directory.http.unexpected_status",
                member_id=str(member_id),
                status_code=response.status_code,
            )
            raise DirectoryAdapterError(
                f"member directory responded with unexpected status {response.status_code}"
            )

        try:
            payload = DirectoryMemberPayload.model_validate(response.json())
            since = payload.membershipSince
            if since.tzinfo is not None:
                since = since.astimezone(timezone.utc)
            return DirectoryMember(
                member_id=payload.memberId,
                active_member=payload.activeMember,
                membership_since=since,
            )
        except (ValueError, ValidationError) as exc:
            logger.warning("member_directory.http.malformed_payload", member_id=str(member_id))
            raise DirectoryAdapterError(f"malformed member directory payload: {exc}") from exc


__all__ = ["DirectoryMemberPayload", "HttpMemberDirectory"]
