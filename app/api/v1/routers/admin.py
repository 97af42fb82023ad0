"""
Admin panel routes.

Everything under the admin prefix sits behind the route guard middleware,
so handlers here can rely on a validated session token.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.api.v1.routers.auth import get_session
from app.api.v1.services.auth import auth_service
from app.core.routes import AUTH_ROUTES
from app.core.session import SessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/panel/admin", tags=["admin"])


@router.get("")
@router.get("/")
async def admin_landing(session: SessionStore = Depends(get_session)) -> Dict[str, Any]:
    """Admin panel landing data for the signed-in administrator."""
    user = await auth_service.get_current_user_data(session.token)
    return {
        "panel": "admin",
        "user": user,
        "logout_redirect_to": AUTH_ROUTES.after_logout_path,
    }
