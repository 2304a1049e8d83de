"""Admin role routes: role check and granting admin to a user."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.identity import IdentityProviderError, grant_admin_role, is_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from services.store_service.schemas import (
    CheckAdminResponse,
    MakeAdminRequest,
    MakeAdminResponse,
)

router = APIRouter(tags=["admin"])
logger = get_logger(__name__)


@router.get(
    "/check-admin",
    response_model=CheckAdminResponse,
    response_model_by_alias=True,
)
async def check_admin(
    current_user: AuthUser = Depends(get_current_user),
):
    """Tell the storefront whether the signed-in user is an admin."""
    try:
        allowed = await is_admin(current_user)
    except IdentityProviderError as e:
        logger.error(f"Admin check failed for {current_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider unavailable",
        )
    return CheckAdminResponse(is_admin=allowed)


@router.post("/make-admin", response_model=MakeAdminResponse)
async def make_admin(
    request: MakeAdminRequest,
    current_user: AuthUser = Depends(require_admin),
):
    """Grant the admin role to another user."""
    try:
        await grant_admin_role(request.user_id)
    except IdentityProviderError as e:
        logger.error(f"Granting admin to {request.user_id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider unavailable",
        )

    logger.info("User %s granted admin to %s", current_user.user_id, request.user_id)
    return MakeAdminResponse(user_id=request.user_id)
