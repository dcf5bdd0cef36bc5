"""api: FastAPI surface over the scheduling engine."""
