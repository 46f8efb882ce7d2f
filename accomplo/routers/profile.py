from fastapi import APIRouter, Depends

from ..deps import get_current_profile, get_current_user, get_store
from ..schemas import ProfileOut, ProfileUpdate, UserOut
from ..stores import Store

router = APIRouter(prefix="/profile", tags=["profile"])

@router.get("")
def get_profile(profile: ProfileOut = Depends(get_current_profile)):
    return profile.model_dump(mode="json")

@router.patch("")
def update_profile(
    payload: ProfileUpdate,
    user: UserOut = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    p = store.update_profile(user, payload.model_dump(exclude_unset=True))
    return p.model_dump(mode="json")
