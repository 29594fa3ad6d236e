"""HTTP API: FastAPI app, engine manager, routes."""
