"""
Application Modules.

- backend/: FastAPI service, database, configuration, note events
- client/: Client core (session, note store, autosave, trash, list view)
"""
