from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from the identity provider's JWT.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="sub")
    email: Optional[str] = None
    role: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    public_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def claimed_role(self) -> Optional[str]:
        """Role carried in the token, checked in the same places the provider stores it."""
        return (
            self.role
            or self.metadata.get("role")
            or self.public_metadata.get("role")
        )
