"""
User model.
Users are read-only to the issue core; their lifecycle and auth live elsewhere.
"""

from pydantic import Field

from app.models.base import CamelModel


class User(CamelModel):
    id: str = Field(..., description="User identifier")
    name: str
    email: str = ""
    phone: str = ""
    is_admin: bool = Field(default=False, description="Municipal staff account")
