"""Pydantic schemas for request validation and service results."""
from zxsgit.schemas.auth import LoginRequest, RegisterRequest
from zxsgit.schemas.company import CompanyPayload
from zxsgit.schemas.result import Result
from zxsgit.schemas.users import AdminUserUpdate, SelfUpdate, UserSyncRequest

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "CompanyPayload",
    "Result",
    "AdminUserUpdate",
    "SelfUpdate",
    "UserSyncRequest",
]
