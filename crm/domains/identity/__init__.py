from crm.domains.identity.entities import ADMIN_ROLE, PasswordResetToken, User
from crm.domains.identity.schemas import (
    UserRegister, UserLogin, UserResponse, AuthResponse, ProfileUpdate,
    EmailChange, PasswordChange, ForgotPasswordRequest, ResetPasswordRequest
)

__all__ = [
    "ADMIN_ROLE", "PasswordResetToken", "User",
    "UserRegister", "UserLogin", "UserResponse", "AuthResponse", "ProfileUpdate",
    "EmailChange", "PasswordChange", "ForgotPasswordRequest", "ResetPasswordRequest"
]
