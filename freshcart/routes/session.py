"""Session and identity routes"""

from typing import Optional
from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Depends

from ..core.session import SessionManager
from ..security.auth import get_current_user
from ..security.roles import Identity, home_path_for
from .deps import get_session_manager

router = APIRouter(prefix="/api", tags=["Session"])


class SessionResponse(BaseModel):
    session_id: str


class MeResponse(BaseModel):
    authenticated: bool
    user_id: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    home_path: str


@router.post("/session", response_model=SessionResponse, status_code=201)
async def create_session(manager: SessionManager = Depends(get_session_manager)):
    """Start a shopper session"""
    session = manager.create_session()
    return SessionResponse(session_id=session.session_id)


@router.delete("/session/{session_id}")
async def end_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """End a shopper session; its stored cart is kept"""
    if not manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"session_id": session_id, "ended": True}


@router.get("/me", response_model=MeResponse)
async def who_am_i(identity: Optional[Identity] = Depends(get_current_user)):
    """Current identity and the page its role lands on"""
    if identity is None:
        return MeResponse(authenticated=False, home_path=home_path_for(None))

    return MeResponse(
        authenticated=True,
        user_id=identity.user_id,
        role=identity.role.value,
        email=identity.email,
        home_path=home_path_for(identity.role),
    )
