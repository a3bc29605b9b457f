from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from a Supabase access token.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    # Postgres role claim ("authenticated", "service_role"); the marketplace
    # role (customer/merchant/admin) lives in users.role.
    role: str = "authenticated"
