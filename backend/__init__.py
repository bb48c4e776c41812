"""ComptaCI backend: FastAPI application (`backend.main:app`), routers and domain services."""
