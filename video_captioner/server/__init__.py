"""HTTP API package: FastAPI app and its pydantic models."""
