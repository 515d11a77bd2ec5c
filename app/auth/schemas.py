from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Authenticated caller as resolved from the bearer token."""

    id: UUID
    email: str
    full_name: str
    role: str
