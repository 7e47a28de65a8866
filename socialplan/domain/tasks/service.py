"""Task service - the per-user task document"""

import logging

from sqlalchemy.orm import Session

from ...models import UserTasks, utc_now
from .schemas import Task, TaskDocument

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, db: Session):
        self.db = db

    def get_tasks(self, uid: str) -> TaskDocument:
        doc = self.db.query(UserTasks).filter(UserTasks.uid == uid).first()
        if not doc:
            return TaskDocument(uid=uid, tasks=[], updated_at=None)
        return TaskDocument.model_validate(doc)

    def save_tasks(self, uid: str, tasks: list[Task]) -> TaskDocument:
        """Replace the stored array; the last writer wins"""
        doc = self.db.query(UserTasks).filter(UserTasks.uid == uid).first()
        payload = [task.model_dump() for task in tasks]
        now = utc_now()

        if doc is None:
            doc = UserTasks(uid=uid, tasks=payload, updated_at=now)
            self.db.add(doc)
        else:
            doc.tasks = payload
            doc.updated_at = now

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"❌ Failed to save tasks for {uid}")
            raise
        self.db.refresh(doc)

        logger.info(f"💾 Saved {len(payload)} tasks for {uid}")
        return TaskDocument.model_validate(doc)
