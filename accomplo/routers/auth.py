import logging

from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..deps import get_current_user, get_store
from ..schemas import PasswordUpdate, SignIn, SignUp, UserOut
from ..security import create_token
from ..stores import InvalidCredentials, Store, UserExists

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

def _check_password(password: str) -> None:
    if len(password) < settings.min_password_length:
        raise HTTPException(422, f"Password must be at least {settings.min_password_length} characters.")

def _session(user: UserOut) -> dict:
    return {"ok": True, "token": create_token(user.id), "user": user.model_dump(mode="json")}

@router.post("/signup")
def sign_up(payload: SignUp, store: Store = Depends(get_store)):
    _check_password(payload.password)
    try:
        user = store.sign_up(
            payload.email, payload.password,
            display_name=payload.display_name, avatar_url=payload.avatar_url,
        )
    except UserExists as e:
        raise HTTPException(409, str(e))
    logger.info("[auth] sign-up %s (%s)", user.id, store.name)
    return _session(user)

@router.post("/signin")
def sign_in(payload: SignIn, store: Store = Depends(get_store)):
    try:
        user = store.sign_in(payload.email, payload.password)
    except InvalidCredentials as e:
        logger.warning("[auth] failed sign-in")
        raise HTTPException(401, str(e))
    return _session(user)

@router.post("/signout")
def sign_out(user: UserOut = Depends(get_current_user)):
    # tokens are stateless; the client forgets it
    logger.info("[auth] sign-out %s", user.id)
    return {"ok": True}

@router.get("/me")
def me(user: UserOut = Depends(get_current_user)):
    return user.model_dump(mode="json")

@router.post("/password")
def update_password(
    payload: PasswordUpdate,
    user: UserOut = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    _check_password(payload.password)
    if payload.password != payload.confirm_password:
        raise HTTPException(422, "Passwords do not match.")
    store.update_password(user, payload.password)
    logger.info("[auth] password updated for %s", user.id)
    return {"ok": True}
