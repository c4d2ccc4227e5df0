"""
The `api` package defines the backend's HTTP interface,
along with supporting utilities and data models.

It integrates FastAPI routing, JWT authentication, and the chat pipeline
that talks to the completion provider. The package ensures clean
request/response validation, owner-scoped access control, and
orchestration of each chat turn.

Contents
--------
- fast_api
    Defines the FastAPI router with endpoints for:
        * User registration, login, session lookup and logout
        * Project creation, update, retrieval and deletion
        * Sending chat messages and fetching chat history
        * Health probe

- models
    Pydantic schemas for request/response validation:
        * User credentials and registration payloads
        * Project payloads and model configuration
        * Chat turn payloads and response shapes

- utils
    JWT utilities:
        * `create_access_token` — issues signed JWTs with expiration
        * `verify_token` — validates JWTs and extracts the user id
        * `redact_token` — shortens tokens before they reach the logs

- completion
    Completion provider protocol and its OpenAI (LangChain) implementation,
    including the mapping of provider failures onto the error taxonomy.

- chat_pipeline
    Orchestration of a chat turn:
        * Ownership check, completion call and echo fallback
        * Persistence of the turn and history retrieval
"""
