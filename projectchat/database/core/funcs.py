"""
Service functions used by the API router.

Identity helpers return small result dictionaries (`{'res': bool, ...}`) the
router turns into responses; project helpers raise `NotFoundOrForbidden`
when the ownership guard finds nothing.
"""

import logging

from sqlalchemy.orm import Session

from projectchat.database.daos import ProjectDao, UserDao, verify_password
from projectchat.database.entities import Project, User
from projectchat.errors import NotFoundOrForbidden

logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found"


# ===== Identity =====
def check_create_user_instance(db: Session, username: str, email: str, password: str) -> dict:
    """
    Register a user unless the email is already taken.

    Returns
    -------
    dict
        {'res': True, 'user': User} or {'res': False, 'detail': str}
    """
    users = UserDao(db)
    email = email.strip().lower()
    if users.get_by_email(email) is not None:
        logger.info("Registration refused, email already in use")
        return {"res": False, "detail": "User with this email already exists"}

    user = users.create_user(username=username, email=email, password=password)
    logger.info("User %s registered", user.id)
    return {"res": True, "user": user}


def login_user(db: Session, email: str, password: str) -> dict:
    """
    Check credentials.

    Returns
    -------
    dict
        {'authenticated': True, 'user': User} or {'authenticated': False, 'detail': str}
    """
    user = UserDao(db).get_by_email(email.strip().lower())
    if user is None or not verify_password(password, user.password):
        return {"authenticated": False, "detail": "Invalid credentials"}
    return {"authenticated": True, "user": user}


def get_user(db: Session, user_id: str) -> User | None:
    return UserDao(db).get_by_id(user_id)


# ===== Projects =====
def get_projects(db: Session, owner_id: str, expand: bool = False) -> list[Project]:
    return ProjectDao(db).list_owned(owner_id, expand=expand)


def get_owned_project(db: Session, project_id: str, owner_id: str, expand: bool = False) -> Project:
    project = ProjectDao(db).find_owned(project_id, owner_id, expand=expand)
    if project is None:
        raise NotFoundOrForbidden(PROJECT_NOT_FOUND)
    return project


def create_project(db: Session, owner_id: str, fields: dict) -> Project:
    project = ProjectDao(db).create_project(owner_id, fields)
    logger.info("Project %s created for user %s", project.id, owner_id)
    return project


def update_project(db: Session, project_id: str, owner_id: str, fields: dict) -> Project:
    projects = ProjectDao(db)
    project = projects.find_owned(project_id, owner_id)
    if project is None:
        raise NotFoundOrForbidden(PROJECT_NOT_FOUND)
    return projects.update_project(project, fields)


def delete_project(db: Session, project_id: str, owner_id: str) -> None:
    projects = ProjectDao(db)
    project = projects.find_owned(project_id, owner_id)
    if project is None:
        raise NotFoundOrForbidden(PROJECT_NOT_FOUND)
    projects.delete_project(project)
    logger.info("Project %s deleted", project_id)
