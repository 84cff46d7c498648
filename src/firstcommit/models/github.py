from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Repository(BaseModel):
    """Repository metadata needed for period clamping."""

    model_config = ConfigDict(frozen=True)

    org: str
    name: str
    created_at: datetime
    default_branch: str

    @classmethod
    def from_api(cls, org: str, payload: dict) -> Repository:
        return cls(
            org=org,
            name=payload["name"],
            created_at=payload["created_at"],
            default_branch=payload.get("default_branch") or "main",
        )


class Commit(BaseModel):
    """A single commit as returned by the list-commits endpoint."""

    model_config = ConfigDict(frozen=True)

    sha: str
    author_login: str | None = None  # None when GitHub can't link the commit to an account
    authored_at: datetime

    @classmethod
    def from_api(cls, payload: dict) -> Commit:
        account = payload.get("author") or {}
        return cls(
            sha=payload["sha"],
            author_login=account.get("login") or None,
            authored_at=payload["commit"]["author"]["date"],
        )
