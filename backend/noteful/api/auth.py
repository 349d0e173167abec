from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from noteful.api.deps import get_store
from noteful.models.auth import LoginRequest, TokenResponse
from noteful.services.accounts import authenticate
from noteful.storage.document_store import DocumentStore
from noteful.utils.jwt_auth import Identity, create_access_token, get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, store: DocumentStore = Depends(get_store)):
    user = await authenticate(store, req.username, req.password)
    if user is None:
        # same answer for unknown user and wrong password
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_access_token(user_id=user["id"], username=user["username"])
    return TokenResponse(access_token=token)


@router.post("/refresh", response_model=TokenResponse)
def refresh(user: Identity = Depends(get_current_user)):
    return TokenResponse(access_token=create_access_token(user_id=user.id, username=user.username))
