from .app import create_app
from .session import CompilationRecord, CompilationStore

__all__ = [
    "create_app",
    "CompilationRecord",
    "CompilationStore",
]
