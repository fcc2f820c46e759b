"""The authenticated session passed explicitly to every repository call."""

from datetime import datetime, timezone

from pydantic import BaseModel


class SessionContext(BaseModel):
    """An authenticated user's identity token plus identifier.

    `user_id` is the identity provider's user id (the token's `sub` claim) and
    is the owner id stamped on, and used to filter, every book record.
    """

    user_id: str
    id_token: str
    email: str | None = None
    expires_at: datetime | None = None

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= datetime.now(timezone.utc)
