from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from projectchat.database.entities import ChatTurn
from projectchat.errors import PersistenceError

HISTORY_LIMIT = 50


class ChatDao:
    """Data access for `ChatTurn` rows."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, turn: ChatTurn) -> ChatTurn:
        """
        Persist a single turn.

        Raises
        ------
        PersistenceError
            If the store rejects the write. The session is rolled back and
            nothing is retried.
        """
        try:
            self.db.add(turn)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError() from e
        return turn

    def query_by_project_and_owner(
        self,
        project_id: str,
        owner_id: str,
        limit: int = HISTORY_LIMIT,
        expand: bool = False,
    ) -> list[ChatTurn]:
        """
        Return the latest `limit` turns of a project written by `owner_id`,
        oldest first.
        """
        stmt = (
            select(ChatTurn)
            .where(ChatTurn.project_id == project_id, ChatTurn.user_id == owner_id)
            .order_by(ChatTurn.created_at.desc())
            .limit(limit)
        )
        if expand:
            stmt = stmt.options(joinedload(ChatTurn.project), joinedload(ChatTurn.user))
        rows = self.db.scalars(stmt).all()
        return list(reversed(rows))
