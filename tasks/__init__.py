# Tasks package - Celery background tasks
from .analysis import (
    run_comprehensive_analysis,
    CallbackTask,
)

__all__ = [
    "run_comprehensive_analysis",
    "CallbackTask",
]
