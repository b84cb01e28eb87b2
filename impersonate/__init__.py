from impersonate.engine import ImpersonationEngine
from impersonate.environment import build_child_environment
from impersonate.types import ImpersonationResult, Session

__all__ = [
    "ImpersonationEngine",
    "ImpersonationResult",
    "Session",
    "build_child_environment",
]
