"""API routes package initialization."""
from plantcare.api.routes import health

__all__ = ["health"]
