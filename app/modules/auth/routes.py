from fastapi import APIRouter, Depends, Request

from app.core.audit import AuditLogger, get_client_ip
from app.core.dependencies import get_auth_service, get_audit_logger, get_current_admin
from app.core.permissions import PermissionManager
from app.modules.auth.schemas import LoginRequest, TokenResponse, PasswordChangeRequest, MeResponse, AdminUser
from app.modules.auth.service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Login and get access token (admins only)"""
    token = service.login(login_data)
    audit.log(token.user, "LOGIN", "AUTH", ip_address=get_client_ip(request))
    return token


@router.post("/logout", status_code=200)
async def logout(
    request: Request,
    admin: AdminUser = Depends(get_current_admin),
    service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Logout and invalidate session"""
    audit.log(admin, "LOGOUT", "AUTH", ip_address=get_client_ip(request))
    service.logout()
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(admin: AdminUser = Depends(get_current_admin)):
    """Current admin with effective permissions and menu (for frontend UI)"""
    return MeResponse(
        **admin.model_dump(),
        effective_permissions=PermissionManager.get_effective_permissions(admin),
        menu=PermissionManager.get_menu_items(admin)
    )


@router.post("/password", status_code=200)
async def change_password(
    body: PasswordChangeRequest,
    admin: AdminUser = Depends(get_current_admin),
    service: AuthService = Depends(get_auth_service)
):
    """Change the current admin's password"""
    service.update_password(admin.id, body.new_password)
    return {"message": "Password updated"}
