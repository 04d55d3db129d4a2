"""Application interfaces (ports): lifecycle protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from find_cache.infrastructure.
"""

from find_cache.application.interfaces.lifecycle import LifecycleHook, RecordState

__all__ = [
    "LifecycleHook",
    "RecordState",
]
