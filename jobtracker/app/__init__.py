"""FastAPI surface over the tracking core."""
