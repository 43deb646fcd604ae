from .state import SessionState

__all__ = ["SessionState"]
