import logging
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..schemas import AccomplishmentOut, ProfileOut, UserOut
from ..security import hash_password, verify_password
from ..weeks import month_year
from .base import (
    PROFILE_FIELDS, InvalidCredentials, NotFound, Store, UserExists, default_display_name,
)

logger = logging.getLogger(__name__)


class SqlStore(Store):
    """Users, profiles and accomplishments as relational tables."""

    name = "sql"

    def __init__(self, db: Session):
        self.db = db

    # ---------- identity ----------
    def sign_up(self, email, password, display_name=None, avatar_url=None):
        email = email.strip().lower()
        if self.db.query(models.User).filter(models.User.email == email).first():
            raise UserExists()
        u = models.User(
            id=str(uuid4()),
            email=email,
            password_hash=hash_password(password),
            display_name=display_name or default_display_name(email),
            avatar_url=avatar_url,
        )
        self.db.add(u)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race against a concurrent sign-up for the same email
            self.db.rollback()
            raise UserExists()
        logger.info("[store] created user %s", u.id)
        return UserOut.model_validate(u)

    def sign_in(self, email, password):
        u = self.db.query(models.User).filter(models.User.email == email.strip().lower()).first()
        if not u or not verify_password(password, u.password_hash):
            raise InvalidCredentials()
        return UserOut.model_validate(u)

    def get_user(self, user_id):
        u = self.db.get(models.User, user_id)
        return UserOut.model_validate(u) if u else None

    def update_password(self, user, new_password):
        u = self.db.get(models.User, user.id)
        if not u:
            raise NotFound("User not found")
        u.password_hash = hash_password(new_password)
        self.db.commit()

    # ---------- profile ----------
    def _profile_row(self, user: UserOut) -> models.Profile:
        p = self.db.query(models.Profile).filter(models.Profile.user_id == user.id).first()
        if p:
            return p
        p = models.Profile(
            id=str(uuid4()),
            user_id=user.id,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
        )
        self.db.add(p)
        try:
            self.db.commit()
        except IntegrityError:
            # another request created it first; at most one profile per user
            self.db.rollback()
            return self.db.query(models.Profile).filter(models.Profile.user_id == user.id).one()
        logger.info("[store] created profile %s for user %s", p.id, user.id)
        return p

    def get_profile(self, user):
        return ProfileOut.model_validate(self._profile_row(user))

    def update_profile(self, user, changes):
        p = self._profile_row(user)
        for key in PROFILE_FIELDS:
            if key in changes:
                setattr(p, key, changes[key])
        p.updated_at = models.utcnow()
        self.db.commit()
        self.db.refresh(p)
        return ProfileOut.model_validate(p)

    # ---------- accomplishments ----------
    def list_accomplishments(self, profile):
        rows = (
            self.db.query(models.Accomplishment)
            .filter(models.Accomplishment.profile_id == profile.id)
            .order_by(models.Accomplishment.created_at.desc())
            .all()
        )
        return [AccomplishmentOut.model_validate(r) for r in rows]

    def create_accomplishment(self, profile, content, type, category):
        now = models.utcnow()
        a = models.Accomplishment(
            id=str(uuid4()),
            profile_id=profile.id,
            content=content,
            type=type,
            category=category,
            month_year=month_year(now),
            created_at=now,
        )
        self.db.add(a)
        self.db.commit()
        return AccomplishmentOut.model_validate(a)

    def delete_accomplishment(self, profile, accomplishment_id):
        n = (
            self.db.query(models.Accomplishment)
            .filter(
                models.Accomplishment.id == accomplishment_id,
                models.Accomplishment.profile_id == profile.id,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if n == 0:
            raise NotFound("Accomplishment not found")

    def close(self):
        self.db.close()
