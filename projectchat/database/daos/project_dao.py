from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from projectchat.database.entities import Project
from projectchat.errors import PersistenceError


class ProjectDao:
    """
    Data access for `Project` rows.

    Every lookup by id is filtered by owner as well, so a project that exists
    but belongs to someone else is indistinguishable from a missing one.
    Pass `expand=True` to load the owner in the same query.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_owned(self, project_id: str, owner_id: str, expand: bool = False) -> Project | None:
        stmt = select(Project).where(Project.id == project_id, Project.user_id == owner_id)
        if expand:
            stmt = stmt.options(joinedload(Project.owner))
        return self.db.scalars(stmt).first()

    def list_owned(self, owner_id: str, expand: bool = False) -> list[Project]:
        stmt = select(Project).where(Project.user_id == owner_id).order_by(Project.created_at.desc())
        if expand:
            stmt = stmt.options(joinedload(Project.owner))
        return list(self.db.scalars(stmt).all())

    def create_project(self, owner_id: str, fields: dict[str, Any]) -> Project:
        project = Project(user_id=owner_id, **fields)
        self._commit(project)
        return project

    def update_project(self, project: Project, fields: dict[str, Any]) -> Project:
        for key, value in fields.items():
            setattr(project, key, value)
        self._commit(project)
        return project

    def delete_project(self, project: Project) -> None:
        try:
            self.db.delete(project)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError() from e

    def _commit(self, project: Project) -> None:
        try:
            self.db.add(project)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError() from e
