"""
The `entities` package defines the ORM models of the application,
representing the database tables as Python classes via SQLAlchemy.

These entity classes are the foundation of the persistence layer,
used by DAOs (`daos` package) to perform CRUD operations.

Contents
--------
- User
    Represents a registered user in the system.
    * Stores username, unique email and the bcrypt password hash
    * Owns projects (deleted together with the user)

- Project
    Represents a conversation context belonging to a user.
    * Stores name, description and owner (user_id)
    * Holds the model configuration (model, temperature, max_tokens)
    * Tracks active flag and created/updated timestamps

- ChatTurn
    Represents one message/response pair within a project.
    * Stores message text, generated response and role ("user")
    * Records token usage and model name
    * Deleted together with its project
"""

from projectchat.database.entities.base import Base, new_id, utc_now
from projectchat.database.entities.user import User
from projectchat.database.entities.project import Project
from projectchat.database.entities.chat_turn import ChatTurn

__all__ = ["Base", "User", "Project", "ChatTurn", "new_id", "utc_now"]
