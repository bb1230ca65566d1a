"""
Dualmode-specific exceptions.
"""

from __future__ import annotations

import typing as t


class DualModeError(Exception):
    """
    Base class for every error raised by dualmode.
    """


class ArgumentError(DualModeError, TypeError):
    """
    Raised synchronously for invalid arguments.

    Notes
    -----
    Covers a wrong number of arguments to ``build``, a missing instance passed
    to ``promisify`` or ``dual_mode``, and an invalid ``declare`` manifest.
    """


class MissingCapabilityError(DualModeError, LookupError):
    """
    Raised in strict mode when a nested capability has no live accessor.

    Parameters
    ----------
    accessor : str
        Attribute name that was looked up on the live object.
    path : str
        Dotted path of the capability tree node being patched.
    """

    def __init__(self, accessor: str, path: str) -> None:
        self.accessor = accessor
        self.path = path
        super().__init__(f"No live sub-instance at '{accessor}' for capability '{path}'")


class OperationError(DualModeError):
    """
    Wrap a non-exception error value passed to an operation callback.

    Parameters
    ----------
    error : typing.Any
        Raw value received as the callback's first argument.
    """

    def __init__(self, error: t.Any) -> None:
        self.error = error
        super().__init__(error)
