import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
for name in ("REDIS_URL", "REDIS_HOST", "RESEND_API_KEY"):
    os.environ.pop(name, None)

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from socialplan import rate_limiter  # noqa: E402
from socialplan.auth import get_current_user  # noqa: E402
from socialplan.database import Base, SessionLocal, engine, get_db  # noqa: E402
from socialplan.domain.profiles.service import ProfileService  # noqa: E402
from socialplan.main import app  # noqa: E402
from socialplan.models import UserProfile  # noqa: E402
from socialplan.shared.errors import OfflineError, SyncError  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    rate_limiter.memory_cache.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(uid: str, display_name: str = None, email: str = None, **fields) -> UserProfile:
        profile = ProfileService(db).create_profile(
            uid=uid,
            display_name=display_name or uid.title(),
            email=email or f"{uid}@example.com",
        )
        for key, value in fields.items():
            setattr(profile, key, value)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def login():
    """Authenticate subsequent requests as `uid`"""

    def _login(uid: str):
        def current_user(db: Session = Depends(get_db)) -> UserProfile:
            return db.query(UserProfile).filter(UserProfile.uid == uid).one()

        app.dependency_overrides[get_current_user] = current_user

    return _login


class FakeRemote:
    """In-memory stand-in for RemoteBackend"""

    def __init__(self):
        self.online = True
        self.tasks_doc = {"uid": "alice", "tasks": [], "updated_at": None}
        self.saved: list[list[dict]] = []
        self.fail_saves = 0
        self.profile = None
        self.profile_calls = []
        self.search_results: list[dict] = []
        self.followed: list[str] = []
        self.free_slots: list[dict] = []
        self.watchers = []
        self.codes_sent = 0
        self.signup_result = {"verification_sent": True, "message": "sent"}

    def _check(self):
        if not self.online:
            raise OfflineError("Network error. Please check your internet connection.")

    async def probe(self):
        return self.online

    async def get_tasks(self):
        self._check()
        return dict(self.tasks_doc)

    async def save_tasks(self, tasks):
        self._check()
        if self.fail_saves:
            self.fail_saves -= 1
            raise SyncError("Internal server error", 500)
        self.saved.append(list(tasks))
        self.tasks_doc = {"uid": "alice", "tasks": list(tasks), "updated_at": "now"}
        return self.tasks_doc

    async def get_profile(self):
        self._check()
        return dict(self.profile) if self.profile else None

    async def create_profile(self, display_name=None):
        self._check()
        self.profile = {"uid": "alice", "display_name": display_name or "alice", "bio": ""}
        return dict(self.profile)

    async def update_profile(self, data):
        self._check()
        self.profile_calls.append(("profile", data))
        self.profile = {**self.profile, **data}
        return dict(self.profile)

    async def update_bio(self, bio):
        return await self.update_profile({"bio": bio})

    async def update_availability(self, availability):
        return await self.update_profile({"availability": availability})

    async def search(self, term, limit=None):
        self._check()
        return [dict(r) for r in self.search_results]

    async def follow(self, uid):
        self._check()
        self.followed.append(uid)
        return {"success": True, "uid": uid, "is_following": True}

    async def unfollow(self, uid):
        self._check()
        self.followed.remove(uid)
        return {"success": True, "uid": uid, "is_following": False}

    async def free_time(self, other_uid):
        self._check()
        return {"uid": "alice", "other_uid": other_uid, "slots": list(self.free_slots)}

    async def signup(self, email, password, confirm_password, display_name=None):
        self._check()
        if password != confirm_password:
            raise SyncError("Passwords do not match", 400)
        return dict(self.signup_result)

    async def send_verification_code(self):
        self._check()
        self.codes_sent += 1
        return {"success": True}

    async def verify_code(self, code):
        self._check()
        if code != "123456":
            raise SyncError("Invalid verification code", 400)
        return {"success": True, "email_verified": True}

    def watch(self, fetch, callback, interval=5.0):
        self.watchers.append(callback)
        return lambda: self.watchers.remove(callback)


@pytest.fixture
def remote():
    return FakeRemote()
