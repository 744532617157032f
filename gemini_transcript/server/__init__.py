"""HTTP API: FastAPI app, job store, and request/response models."""
