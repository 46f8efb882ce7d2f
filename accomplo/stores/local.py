import json
import logging
import os
import secrets
import string
import tempfile
import threading
import time
from pathlib import Path

from ..models import utcnow
from ..schemas import AccomplishmentOut, ProfileOut, UserOut
from ..security import hash_password, verify_password
from ..weeks import month_year
from .base import (
    PROFILE_FIELDS, InvalidCredentials, NotFound, Store, UserExists, default_display_name,
)

logger = logging.getLogger(__name__)

USERS_KEY = "accomplo_all_users"
PROFILE_KEY = "accomplo_profile"
ACCOMPLISHMENTS_KEY = "accomplo_accomplishments"

_B36 = string.digits + string.ascii_lowercase
_locks: dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()

def _lock_for(path: Path) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault(str(path.resolve()), threading.Lock())

def _millis() -> int:
    return int(time.time() * 1000)


class LocalStore(Store):
    """
    Offline mode: everything lives in one JSON object of local-storage style
    keys. Per-user data is namespaced by suffixing the key with the user id,
    e.g. ``accomplo_accomplishments_user_1700000000000``.
    """

    name = "local"

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    # ---------- raw key-value access ----------
    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    @staticmethod
    def _key(prefix: str, user_id: str) -> str:
        return f"{prefix}_{user_id}"

    # ---------- identity ----------
    def sign_up(self, email, password, display_name=None, avatar_url=None):
        email = email.strip().lower()
        with self._lock:
            data = self._load()
            users = data.setdefault(USERS_KEY, [])
            if any(u["email"] == email for u in users):
                raise UserExists()
            taken = {u["user"]["id"] for u in users}
            n = _millis()
            while f"user_{n}" in taken:
                n += 1
            user = UserOut(
                id=f"user_{n}",
                email=email,
                display_name=display_name or default_display_name(email),
                avatar_url=avatar_url,
                created_at=utcnow(),
            )
            users.append({
                "email": email,
                "password_hash": hash_password(password),
                "user": user.model_dump(mode="json"),
            })
            self._save(data)
        logger.info("[store] created local user %s", user.id)
        return user

    def sign_in(self, email, password):
        email = email.strip().lower()
        for entry in self._load().get(USERS_KEY, []):
            if entry["email"] == email and verify_password(password, entry["password_hash"]):
                return UserOut.model_validate(entry["user"])
        raise InvalidCredentials()

    def get_user(self, user_id):
        for entry in self._load().get(USERS_KEY, []):
            if entry["user"]["id"] == user_id:
                return UserOut.model_validate(entry["user"])
        return None

    def update_password(self, user, new_password):
        with self._lock:
            data = self._load()
            for entry in data.get(USERS_KEY, []):
                if entry["user"]["id"] == user.id:
                    entry["password_hash"] = hash_password(new_password)
                    self._save(data)
                    return
        raise NotFound("User not found")

    # ---------- profile ----------
    def _profile_in(self, data: dict, user: UserOut) -> tuple[ProfileOut, bool]:
        # caller holds self._lock; returns (profile, created)
        key = self._key(PROFILE_KEY, user.id)
        if data.get(key):
            return ProfileOut.model_validate(data[key]), False
        now = utcnow()
        profile = ProfileOut(
            id=f"profile_{user.id}",
            user_id=user.id,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            created_at=now,
            updated_at=now,
        )
        data[key] = profile.model_dump(mode="json")
        return profile, True

    def get_profile(self, user):
        with self._lock:
            data = self._load()
            profile, created = self._profile_in(data, user)
            if created:
                self._save(data)
        if created:
            logger.info("[store] created local profile %s", profile.id)
        return profile

    def update_profile(self, user, changes):
        updates = {k: changes[k] for k in PROFILE_FIELDS if k in changes}
        # load, merge and save under one lock
        with self._lock:
            data = self._load()
            profile, _ = self._profile_in(data, user)
            profile = profile.model_copy(update={**updates, "updated_at": utcnow()})
            data[self._key(PROFILE_KEY, user.id)] = profile.model_dump(mode="json")
            self._save(data)
        return profile

    # ---------- accomplishments ----------
    def list_accomplishments(self, profile):
        raw = self._load().get(self._key(ACCOMPLISHMENTS_KEY, profile.user_id), [])
        rows = [AccomplishmentOut.model_validate(r) for r in raw]
        rows.sort(key=lambda a: a.created_at, reverse=True)
        return rows

    def create_accomplishment(self, profile, content, type, category):
        now = utcnow()
        suffix = "".join(secrets.choice(_B36) for _ in range(9))
        acc = AccomplishmentOut(
            id=f"acc_{_millis()}_{suffix}",
            content=content,
            type=type,
            category=category,
            month_year=month_year(now),
            created_at=now,
            profile_id=profile.id,
        )
        key = self._key(ACCOMPLISHMENTS_KEY, profile.user_id)
        with self._lock:
            data = self._load()
            # newest first, same as the list order
            data[key] = [acc.model_dump(mode="json")] + data.get(key, [])
            self._save(data)
        return acc

    def delete_accomplishment(self, profile, accomplishment_id):
        key = self._key(ACCOMPLISHMENTS_KEY, profile.user_id)
        with self._lock:
            data = self._load()
            rows = data.get(key, [])
            kept = [r for r in rows if r["id"] != accomplishment_id]
            if len(kept) == len(rows):
                raise NotFound("Accomplishment not found")
            data[key] = kept
            self._save(data)
