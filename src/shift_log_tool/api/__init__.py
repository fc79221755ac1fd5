"""
Integration with the remote log service.
"""

from .log_service import LogServiceClient, LogServiceError

__all__ = [
    "LogServiceClient",
    "LogServiceError",
]
