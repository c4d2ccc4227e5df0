"""
FastAPI Router: Authentication, Projects, and Chat API

This module defines the HTTP API endpoints exposed by the backend. It handles:
- User registration, login, logout and session lookup
- Project creation, update, retrieval and deletion
- Chat turns (send a message, fetch history) through the chat pipeline
- A health probe for the record store

Each endpoint validates input via Pydantic models and returns a
`{'success': True, ...}` envelope. Failures raise `HTTPException` or a
`ChatPlatformError`, both rendered by the handlers in `projectchat.main`.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from projectchat.api.chat_pipeline import ChatPipeline
from projectchat.api.completion import CompletionProvider
from projectchat.api.models import (
    AuthData,
    ChatTurnOut,
    NewMessage,
    ProjectCreationDetails,
    ProjectOut,
    UpdateProjectDetails,
    UserCredentials,
    UserData,
    UserOut,
)
from projectchat.api.utils import create_access_token, redact_token, verify_token
from projectchat.database.core.db import get_db, ping
from projectchat.database.core.funcs import (
    check_create_user_instance,
    create_project,
    delete_project,
    get_owned_project,
    get_projects,
    get_user,
    login_user,
    update_project,
)
from projectchat.database.daos import ChatDao, ProjectDao
from projectchat.database.entities import User, utc_now
from projectchat.errors import PersistenceError

logger = logging.getLogger(__name__)

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


# ===== Dependencies =====
def get_current_user(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Cookie(None),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the caller from `Authorization: Bearer <jwt>` or the `token` cookie.

    Raises
    ------
    HTTPException 401
        If no token is supplied, it does not verify, or its user is gone.
    """
    raw = None
    if authorization and authorization.lower().startswith("bearer "):
        raw = authorization.split(" ", 1)[1].strip()
    elif token:
        raw = token
    if not raw:
        raise HTTPException(status_code=401, detail="Missing token")

    user_id = verify_token(raw)
    user = get_user(db, user_id) if user_id else None
    if user is None:
        logger.info("Rejected token %s", redact_token(raw))
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def get_completion_provider(request: Request) -> CompletionProvider:
    return request.app.state.completion_provider


def get_chat_pipeline(
    db: Session = Depends(get_db),
    provider: CompletionProvider = Depends(get_completion_provider),
) -> ChatPipeline:
    return ChatPipeline(projects=ProjectDao(db), turns=ChatDao(db), provider=provider)


def _issue_session(user: User, response: Response) -> dict:
    access_token = create_access_token({"sub": user.id})
    response.set_cookie(
        key="token",
        value=access_token,
        httponly=True,
        secure=True,
        samesite="none",
    )
    logger.info("Session issued for user %s, token %s", user.id, redact_token(access_token))
    return {"success": True, "data": AuthData(token=access_token, user=UserOut.from_entity(user))}


# ===== Auth =====
@router.post("/auth/register", status_code=201)
def register(data: UserData, response: Response, db: Session = Depends(get_db)):
    """
    Register a new user account and open a session.

    Request Body
    ------------
    UserData {username: str, email: str, password: str}

    Returns
    -------
    dict
        {'success': True, 'data': {'token': str, 'user': {...}}}

    Raises
    ------
    HTTPException 400
        If the email is already registered.
    """
    res = check_create_user_instance(db, username=data.username, email=data.email, password=data.password)
    if not res["res"]:
        raise HTTPException(status_code=400, detail=res["detail"])
    return _issue_session(res["user"], response)


@router.post("/auth/login")
def login(data: UserCredentials, response: Response, db: Session = Depends(get_db)):
    """
    Authenticate a user and set JWT as cookie.

    Request Body
    ------------
    UserCredentials {email: str, password: str}

    Returns
    -------
    dict
        {'success': True, 'data': {'token': str, 'user': {...}}}

    Raises
    ------
    HTTPException 401
        If authentication fails.
    """
    auth = login_user(db, email=data.email, password=data.password)
    if not auth["authenticated"]:
        raise HTTPException(status_code=401, detail=auth["detail"])
    return _issue_session(auth["user"], response)


@router.get("/auth/me")
def me(user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return {"success": True, "data": UserOut.from_entity(user)}


@router.post("/auth/logout")
def logout(response: Response):
    """Logout user by clearing JWT cookie."""
    response.delete_cookie(key="token")
    return {"success": True}


# ===== Projects =====
@router.get("/projects")
def list_projects(expand: bool = False, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Fetch all projects of the caller, newest first.

    Returns
    -------
    dict
        {'success': True, 'data': [Project, ...]}
    """
    projects = get_projects(db, user.id, expand=expand)
    return {"success": True, "data": [ProjectOut.from_entity(p, expand=expand) for p in projects]}


@router.post("/projects", status_code=201)
def new_project(data: ProjectCreationDetails, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Create a new project owned by the caller.

    Request Body
    ------------
    ProjectCreationDetails {name: str, description: str, config: {model, temperature, maxTokens}}
    """
    project = create_project(db, user.id, data.to_fields())
    return {"success": True, "data": ProjectOut.from_entity(project)}


@router.get("/projects/{project_id}")
def read_project(
    project_id: str, expand: bool = False, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Fetch one project. 404 when it is missing or owned by someone else."""
    project = get_owned_project(db, project_id, user.id, expand=expand)
    return {"success": True, "data": ProjectOut.from_entity(project, expand=expand)}


@router.put("/projects/{project_id}")
def edit_project(
    project_id: str,
    data: UpdateProjectDetails,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update name, description, configuration or active flag of a project.

    Request Body
    ------------
    UpdateProjectDetails {name?, description?, config?, isActive?}
    """
    project = update_project(db, project_id, user.id, data.to_fields())
    return {"success": True, "data": ProjectOut.from_entity(project)}


@router.delete("/projects/{project_id}")
def remove_project(project_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a project together with its chat history."""
    delete_project(db, project_id, user.id)
    return {"success": True, "message": "Project deleted"}


# ===== Chat =====
@router.post("/chat/{project_id}", status_code=201)
def send_message(
    project_id: str,
    data: NewMessage,
    user: User = Depends(get_current_user),
    pipeline: ChatPipeline = Depends(get_chat_pipeline),
):
    """
    Process one chat turn.

    Request Body
    ------------
    NewMessage {message: str}

    Returns
    -------
    dict
        {'success': True, 'message': str, 'data': ChatTurn}

    Raises
    ------
    ValidationError 400, NotFoundOrForbidden 404, UpstreamAuthError 401,
    UpstreamQuotaError 402, PersistenceError 500
    """
    turn = pipeline.handle_turn(user.id, project_id, data.message)
    return {"success": True, "message": "Chat processed with AI!", "data": ChatTurnOut.from_entity(turn)}


@router.get("/chat/{project_id}")
def get_messages(
    project_id: str,
    expand: bool = False,
    user: User = Depends(get_current_user),
    pipeline: ChatPipeline = Depends(get_chat_pipeline),
):
    """
    Fetch the latest 50 turns of a project in ascending time order.

    A project the caller does not own yields an empty list.
    """
    turns = pipeline.list_turns(user.id, project_id, expand=expand)
    return {"success": True, "data": [ChatTurnOut.from_entity(t, expand=expand) for t in turns]}


# ===== Health =====
@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        ping(db)
    except SQLAlchemyError as e:
        raise PersistenceError("Database unavailable") from e
    return {"ok": True, "time": utc_now().isoformat(), "database": "connected"}
