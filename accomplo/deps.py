from datetime import datetime
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import settings
from .schemas import ProfileOut, UserOut
from .security import decode_token
from .stores import LocalStore, SqlStore, Store

# sqlite connections get handed between FastAPI's worker threads
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, pool_pre_ping=True, future=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

bearer_scheme = HTTPBearer(auto_error=False)

def get_store() -> Iterator[Store]:
    if settings.backend == "local":
        yield LocalStore(settings.local_store_path)
        return
    store = SqlStore(SessionLocal())
    try:
        yield store
    finally:
        store.close()

def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    store: Store = Depends(get_store),
) -> UserOut:
    user_id = decode_token(credentials.credentials) if credentials else None
    user = store.get_user(user_id) if user_id else None
    if not user:
        raise HTTPException(401, "Not authenticated", headers={"WWW-Authenticate": "Bearer"})
    return user

def get_current_profile(
    user: UserOut = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> ProfileOut:
    return store.get_profile(user)

def get_tz(tz: str | None = Query(None, description="IANA zone of the caller, e.g. Europe/Berlin")) -> ZoneInfo:
    name = tz or settings.timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: directory names like "America" when zones come from tzdata
        raise HTTPException(422, f"Unknown timezone: {name}")

def get_now(zone: ZoneInfo = Depends(get_tz)) -> datetime:
    return datetime.now(zone)
