"""
Communication with the agents running on monitored machines.

This package provides the command batch protocol (building commands,
submitting them in one call, correlating the responses) and the transport
used to reach the agents.
"""

from .commands import (
    RESULT_EMPTY,
    RESULT_ERROR,
    RESULT_SUCCESS,
    RESULT_UNSUPPORTED,
    BatchResult,
    CommandBatch,
    KeaCommand,
    KeaResponse,
    ResultSet,
)
from .forwarder import Forwarder, HttpForwarder

__all__ = [
    "RESULT_EMPTY",
    "RESULT_ERROR",
    "RESULT_SUCCESS",
    "RESULT_UNSUPPORTED",
    "BatchResult",
    "CommandBatch",
    "KeaCommand",
    "KeaResponse",
    "ResultSet",
    "Forwarder",
    "HttpForwarder",
]
