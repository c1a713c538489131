"""HTTP binding of the hunt workflows (FastAPI routes, request/response models, dependencies)."""
