# API package - FastAPI components
from .models import (
    ComprehensiveRequest,
    Phase1Request,
    Phase2Request,
    Phase3Request,
    StepRequest,
    UnifiedRequest,
    ApiResponse,
)
from .routes import router, get_pipeline

__all__ = [
    # Models
    "ComprehensiveRequest",
    "Phase1Request",
    "Phase2Request",
    "Phase3Request",
    "StepRequest",
    "UnifiedRequest",
    "ApiResponse",
    # Router
    "router",
    "get_pipeline",
]
