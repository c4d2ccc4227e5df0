"""
The `daos` package provides the Data Access Layer for the application.

It is responsible for all interactions with the database entities,
encapsulating CRUD operations that support the core functionality
of the system. Each DAO wraps a SQLAlchemy session and abstracts
away the direct queries, offering a cleaner API to the service layer.
Write failures surface as `PersistenceError`.

Contents
--------
- UserDao
    Handles user persistence:
    * Creates users with bcrypt password hashing
    * Fetches users by id or email

- ProjectDao
    Manages project records:
    * Single owner-filtered lookup (`find_owned`), the ownership guard
    * Lists, creates, updates and deletes a user's projects
    * Optional owner expansion on reads

- ChatDao
    Manages chat turn records:
    * Inserts one turn per processed message
    * Fetches the latest 50 turns of a project for a user (chronological order)
"""

from projectchat.database.daos.user_dao import UserDao, hash_password, verify_password
from projectchat.database.daos.project_dao import ProjectDao
from projectchat.database.daos.chat_dao import ChatDao, HISTORY_LIMIT

__all__ = ["UserDao", "ProjectDao", "ChatDao", "HISTORY_LIMIT", "hash_password", "verify_password"]
