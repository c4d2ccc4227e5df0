"""
Pydantic schemas for request validation and response shaping.

Response models are built from ORM entities through their `from_entity`
constructors; field names follow the JSON contract consumed by the web
client (`createdAt`, `metadata.tokens`, ...).
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from projectchat.database.entities import ChatTurn, Project, User

MAX_MESSAGE_LENGTH = 1000

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


# ===== Auth =====
class UserData(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)


class UserCredentials(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: str
    username: str
    email: str

    @classmethod
    def from_entity(cls, user: User) -> "UserOut":
        return cls(id=user.id, username=user.username, email=user.email)


class AuthData(BaseModel):
    token: str
    user: UserOut


# ===== Projects =====
class ProjectConfig(BaseModel):
    model: str = "gpt-3.5-turbo"
    temperature: float = Field(0.7, ge=0, le=2)
    maxTokens: int = Field(150, ge=1, le=4000)


class ProjectCreationDetails(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field("", max_length=500)
    config: ProjectConfig = Field(default_factory=ProjectConfig)

    def to_fields(self) -> dict[str, Any]:
        return {
            "name": self.name.strip(),
            "description": self.description,
            "model": self.config.model,
            "temperature": self.config.temperature,
            "max_tokens": self.config.maxTokens,
        }


class UpdateProjectDetails(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    config: Optional[ProjectConfig] = None
    isActive: Optional[bool] = None

    def to_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if self.name is not None:
            fields["name"] = self.name.strip()
        if self.description is not None:
            fields["description"] = self.description
        if self.config is not None:
            fields.update(
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.maxTokens,
            )
        if self.isActive is not None:
            fields["is_active"] = self.isActive
        return fields


class OwnerRef(BaseModel):
    id: str
    username: str
    email: str


class ProjectOut(BaseModel):
    id: str
    name: str
    description: str
    user: Union[str, OwnerRef]
    config: ProjectConfig
    isActive: bool
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_entity(cls, project: Project, expand: bool = False) -> "ProjectOut":
        user: Union[str, OwnerRef] = project.user_id
        if expand:
            owner = project.owner
            user = OwnerRef(id=owner.id, username=owner.username, email=owner.email)
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            user=user,
            config=ProjectConfig(model=project.model, temperature=project.temperature, maxTokens=project.max_tokens),
            isActive=project.is_active,
            createdAt=project.created_at,
            updatedAt=project.updated_at,
        )


# ===== Chat =====
class NewMessage(BaseModel):
    """Body of POST /chat/{project_id}. Length rules are enforced by the pipeline."""

    message: Optional[str] = None


class TurnMetadata(BaseModel):
    tokens: int = Field(0, ge=0)
    model: str


class ProjectRef(BaseModel):
    id: str
    name: str


class UserRef(BaseModel):
    id: str
    username: str


class ChatTurnOut(BaseModel):
    id: str
    project: Union[str, ProjectRef]
    user: Union[str, UserRef]
    message: str
    response: str
    role: str
    metadata: TurnMetadata
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_entity(cls, turn: ChatTurn, expand: bool = False) -> "ChatTurnOut":
        project: Union[str, ProjectRef] = turn.project_id
        user: Union[str, UserRef] = turn.user_id
        if expand:
            project = ProjectRef(id=turn.project.id, name=turn.project.name)
            user = UserRef(id=turn.user.id, username=turn.user.username)
        return cls(
            id=turn.id,
            project=project,
            user=user,
            message=turn.message,
            response=turn.response,
            role=turn.role,
            metadata=TurnMetadata(tokens=turn.tokens, model=turn.model),
            createdAt=turn.created_at,
            updatedAt=turn.updated_at,
        )
