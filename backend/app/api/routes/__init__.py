# API Routes Module
from app.api.routes import predictions

__all__ = [
    "predictions",
]
