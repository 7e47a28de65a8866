"""
Client sync library: session state, on-device cache and the optimistic
profile/task sync that talks to the Social-Plan API
"""
from .cooldown import ResendCooldown, SignupFlow
from .debounce import DebouncedSaver
from .free_time import FreeTimeCache
from .local_store import LocalStore
from .profile_sync import ProfileSync
from .remote import RemoteBackend
from .session import ConnectivityMonitor, Session, SessionUser
from .task_sync import TaskSync
from .user_search import UserSearch

__all__ = [
    "ConnectivityMonitor",
    "DebouncedSaver",
    "FreeTimeCache",
    "LocalStore",
    "ProfileSync",
    "RemoteBackend",
    "ResendCooldown",
    "Session",
    "SessionUser",
    "SignupFlow",
    "TaskSync",
    "UserSearch",
]
