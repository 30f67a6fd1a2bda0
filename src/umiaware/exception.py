"""
This module contains all the extra exception classes and handling
defined by umiaware

Copyright © 2024 Pixelgen Technologies AB.
"""

from typing import Any


class UmiAwareError(Exception):
    """Base class for all errors raised while refining duplicate sets."""


class ConfigurationError(UmiAwareError):
    """
    Raised when UMIs of different lengths are compared.

    Clustering is only defined for UMIs of one fixed length, so this
    always aborts the run.
    """


class ProtocolError(UmiAwareError):
    """
    Raised when the pull protocol of a stream is violated.

    This signals a bug in the caller (pulling after exhaustion or close)
    or in the stream itself (re-entering a non-empty cluster buffer).
    """


class MissingDataError(UmiAwareError):
    """
    Class to manage reads lacking a UMI when missing UMIs are not allowed.

    Attributes:
        msg: the error message to output
        read: the read without a UMI
        key: the tag that was expected to hold the UMI
    """

    def __init__(self, msg: str, read: Any = None, key: str | None = None):
        super().__init__(msg)
        self.msg = msg
        self.read = read
        self.key = key
