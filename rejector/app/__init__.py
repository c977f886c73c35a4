"""FastAPI application package for the rejection service."""
