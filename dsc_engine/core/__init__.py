"""
Core engine algorithms
"""

from .cdp import DSCEngine, EngineError, ErrorCode, OpResult, result_or_raise

__all__ = [
    "DSCEngine",
    "EngineError",
    "ErrorCode",
    "OpResult",
    "result_or_raise",
]
