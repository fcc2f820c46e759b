from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field


class FirebaseAuthResponse(BaseModel):
    """Response body of the signInWithPassword and signUp endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    id_token: str = Field(alias="idToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    # Firebase sends this as a string of seconds.
    expires_in: int | None = Field(default=None, alias="expiresIn")
    local_id: str = Field(alias="localId")
    email: str | None = None

    def expires_at_datetime(self) -> datetime | None:
        """Convert expires_in to a datetime."""
        if self.expires_in is None:
            return None
        return datetime.now(timezone.utc) + timedelta(seconds=self.expires_in)
