"""
todo_service tests

Covers the backend of the todo service:

- Identifier parsing (`identifiers.py`)
- Token issuing and verification (`auth.py`)
- Credential store and token sets (`credentials.py`)
- Todo store (`todo_store.py`)
- Authentication guard (`dependencies.py`)
- HTTP routes (`routes/`) through the FastAPI application (`main.py`)
"""
