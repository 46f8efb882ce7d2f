"""Both store backends must behave the same behind the Store interface."""
import re
import threading
import time
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from accomplo import models
from accomplo.stores import InvalidCredentials, LocalStore, NotFound, SqlStore, UserExists


@pytest.fixture(params=["sql", "local"])
def store(request, tmp_path):
    if request.param == "local":
        yield LocalStore(tmp_path / "local.json")
        return
    engine = create_engine(f"sqlite:///{tmp_path / 'store.db'}", future=True)
    models.Base.metadata.create_all(bind=engine)
    s = SqlStore(sessionmaker(bind=engine, autocommit=False, autoflush=False)())
    yield s
    s.close()
    engine.dispose()


@pytest.fixture
def user(store):
    return store.sign_up("ada@example.com", "secret123")


class TestIdentity:
    def test_sign_up_then_sign_in(self, store, user):
        assert store.sign_in("ada@example.com", "secret123").id == user.id

    def test_email_is_case_insensitive(self, store, user):
        assert store.sign_in("  ADA@Example.com", "secret123").id == user.id
        with pytest.raises(UserExists):
            store.sign_up("Ada@Example.COM", "other-pass")

    def test_duplicate_email(self, store, user):
        with pytest.raises(UserExists, match="User already exists with this email"):
            store.sign_up("ada@example.com", "whatever1")

    def test_wrong_password(self, store, user):
        with pytest.raises(InvalidCredentials, match="Invalid email or password"):
            store.sign_in("ada@example.com", "nope-nope")

    def test_unknown_email(self, store):
        with pytest.raises(InvalidCredentials):
            store.sign_in("ghost@example.com", "secret123")

    def test_display_name_defaults_to_email_local_part(self, store, user):
        assert user.display_name == "ada"
        grace = store.sign_up("grace@example.com", "secret123", display_name="Grace H.")
        assert grace.display_name == "Grace H."

    def test_get_user(self, store, user):
        assert store.get_user(user.id) == user
        assert store.get_user("missing") is None

    def test_update_password(self, store, user):
        store.update_password(user, "brand-new-pass")
        assert store.sign_in("ada@example.com", "brand-new-pass").id == user.id
        with pytest.raises(InvalidCredentials):
            store.sign_in("ada@example.com", "secret123")


class TestProfile:
    def test_created_lazily_once(self, store, user):
        first = store.get_profile(user)
        second = store.get_profile(user)
        assert first.id == second.id
        assert first.user_id == user.id
        assert first.display_name == "ada"

    def test_one_profile_per_user(self, store, user):
        other = store.sign_up("bob@example.com", "secret123")
        assert store.get_profile(user).id != store.get_profile(other).id

    def test_update_only_touches_given_fields(self, store, user):
        before = store.get_profile(user)
        after = store.update_profile(user, {"avatar_url": "https://img.example/ada.png"})
        assert after.avatar_url == "https://img.example/ada.png"
        assert after.display_name == before.display_name
        assert after.updated_at >= before.updated_at
        assert store.get_profile(user).avatar_url == "https://img.example/ada.png"

    def test_update_can_clear_a_field(self, store, user):
        after = store.update_profile(user, {"display_name": None})
        assert after.display_name is None


class TestAccomplishments:
    def test_create_stamps_fields(self, store, user):
        profile = store.get_profile(user)
        a = store.create_accomplishment(profile, "Ran 10k", "big", "health")
        assert a.profile_id == profile.id
        assert a.type == "big"
        assert a.category == "health"
        assert a.created_at.tzinfo is not None
        assert a.month_year == a.created_at.isoformat()[:7]
        assert re.fullmatch(r"\d{4}-\d{2}", a.month_year)

    def test_list_newest_first(self, store, user):
        profile = store.get_profile(user)
        ids = {store.create_accomplishment(profile, f"thing {i}", "small", "misc").id for i in range(3)}
        rows = store.list_accomplishments(profile)
        assert {r.id for r in rows} == ids
        stamps = [r.created_at for r in rows]
        assert stamps == sorted(stamps, reverse=True)

    def test_list_is_scoped_to_profile(self, store, user):
        other = store.sign_up("bob@example.com", "secret123")
        store.create_accomplishment(store.get_profile(user), "mine", "small", "misc")
        assert store.list_accomplishments(store.get_profile(other)) == []

    def test_delete(self, store, user):
        profile = store.get_profile(user)
        keep = store.create_accomplishment(profile, "keep", "small", "misc")
        drop = store.create_accomplishment(profile, "drop", "big", "misc")
        store.delete_accomplishment(profile, drop.id)
        assert [r.id for r in store.list_accomplishments(profile)] == [keep.id]

    def test_delete_missing(self, store, user):
        with pytest.raises(NotFound):
            store.delete_accomplishment(store.get_profile(user), "acc_missing")

    def test_cannot_delete_someone_elses(self, store, user):
        other = store.sign_up("bob@example.com", "secret123")
        a = store.create_accomplishment(store.get_profile(user), "mine", "small", "misc")
        with pytest.raises(NotFound):
            store.delete_accomplishment(store.get_profile(other), a.id)
        assert len(store.list_accomplishments(store.get_profile(user))) == 1


class TestLocalStoreLayout:
    def test_offline_id_scheme(self, tmp_path):
        store = LocalStore(tmp_path / "local.json")
        user = store.sign_up("ada@example.com", "secret123")
        profile = store.get_profile(user)
        a = store.create_accomplishment(profile, "Wrote docs", "small", "work")
        assert re.fullmatch(r"user_\d+", user.id)
        assert profile.id == f"profile_{user.id}"
        assert re.fullmatch(r"acc_\d+_[0-9a-z]{9}", a.id)

    def test_keys_and_no_plaintext_password(self, tmp_path):
        path = tmp_path / "local.json"
        store = LocalStore(path)
        user = store.sign_up("ada@example.com", "secret123")
        store.create_accomplishment(store.get_profile(user), "Wrote docs", "small", "work")
        raw = path.read_text()
        assert "secret123" not in raw
        for key in ("accomplo_all_users", f"accomplo_profile_{user.id}", f"accomplo_accomplishments_{user.id}"):
            assert f'"{key}"' in raw

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "local.json"
        user = LocalStore(path).sign_up("ada@example.com", "secret123")
        reopened = LocalStore(path)
        assert reopened.sign_in("ada@example.com", "secret123").id == user.id
        assert isinstance(reopened.get_user(user.id).created_at, datetime)

    def test_distinct_ids_for_back_to_back_sign_ups(self, tmp_path):
        store = LocalStore(tmp_path / "local.json")
        a = store.sign_up("a@example.com", "secret123")
        b = store.sign_up("b@example.com", "secret123")
        assert a.id != b.id

    def test_concurrent_profile_updates_both_land(self, tmp_path, monkeypatch):
        path = tmp_path / "local.json"
        user = LocalStore(path).sign_up("ada@example.com", "secret123")
        LocalStore(path).get_profile(user)

        real_save = LocalStore._save

        def slow_save(self, data):
            time.sleep(0.05)
            real_save(self, data)

        monkeypatch.setattr(LocalStore, "_save", slow_save)
        start = threading.Barrier(2)

        def patch(changes):
            start.wait()
            LocalStore(path).update_profile(user, changes)

        threads = [
            threading.Thread(target=patch, args=({"display_name": "Countess"},)),
            threading.Thread(target=patch, args=({"avatar_url": "https://img.example/ada.png"},)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        profile = LocalStore(path).get_profile(user)
        assert profile.display_name == "Countess"
        assert profile.avatar_url == "https://img.example/ada.png"
