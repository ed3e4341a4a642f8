"""Session-scoped private task lists served over a FastAPI API."""
