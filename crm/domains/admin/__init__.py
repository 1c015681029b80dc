from crm.domains.admin.schemas import (
    DashboardResponse, AdminUserResponse, AdminPasswordReset, AdminEmailChange, UserStatusUpdate
)

__all__ = [
    "DashboardResponse", "AdminUserResponse", "AdminPasswordReset", "AdminEmailChange", "UserStatusUpdate"
]
