"""Member directory port and adapters."""

from .directory import DirectoryMember, InMemoryMemberDirectory, MemberDirectory
from .http import HttpMemberDirectory

__all__ = [
    "DirectoryMember",
    "HttpMemberDirectory",
    "InMemoryMemberDirectory",
    "MemberDirectory",
]
