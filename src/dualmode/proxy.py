"""
Non-mutating counterpart of ``promisify``.
We use wrapt to support isinstance checks and other magic methods that standard
__getattr__ wrapping does not support.
Callback-mode operations are wrapped on attribute access, and nested
capabilities are proxied recursively with their subtree, so the wrapped
instance itself is never modified.
"""

import typing as t

import structlog
import wrapt

from dualmode.adapter import CallbackAdapter, adapt
from dualmode.exceptions import ArgumentError
from dualmode.patcher import make_dual_mode
from dualmode.tree import build

log = structlog.get_logger(__name__)


class DualModeProxy(wrapt.ObjectProxy):
    """
    Proxy exposing the dual-mode operation set of the wrapped object.

    Parameters
    ----------
    wrapped : typing.Any
        Live instance to wrap.
    tree : CapabilityTree
        Capability tree describing ``wrapped``.
    callback_adapter : CallbackAdapter
        Future factory used when an operation is called without a callback.

    Example:
        >>> client = dual_mode(Client())
        >>> await client.kv.get("key")  # no callback, returns a future
        >>> client.kv.get("key", on_done)  # plain callback call
    """

    def __init__(self, wrapped, tree, callback_adapter):
        super().__init__(wrapped)
        # Prefixed with _self_ so wrapt keeps them on the proxy, not the wrapped object
        self._self_tree = tree
        self._self_callback_adapter = callback_adapter
        self._self_children = {name.lower(): subtree for name, subtree in tree.objects.items()}

    def __getattr__(self, name):
        original_attr = getattr(self.__wrapped__, name)

        method = self._self_tree.methods.get(name)
        if method is not None and method.is_callback and callable(original_attr):
            return make_dual_mode(fn=original_attr, callback_adapter=self._self_callback_adapter)

        subtree = self._self_children.get(name)
        if subtree is not None and original_attr is not None:
            return DualModeProxy(original_attr, subtree, self._self_callback_adapter)

        return original_attr


def dual_mode(instance: t.Any = None, callback_adapter: CallbackAdapter | None = None) -> t.Any:
    """
    Wrap ``instance`` in a ``DualModeProxy`` without modifying it.

    Parameters
    ----------
    instance : typing.Any
        Live object to wrap.
    callback_adapter : CallbackAdapter | None, optional
        Future factory used when no callback is given. Defaults to ``adapt``.

    Returns
    -------
    DualModeProxy
        Proxy typed as the wrapped instance for callers.

    Raises
    ------
    ArgumentError
        If ``instance`` is missing.
    """
    if instance is None:
        raise ArgumentError("dual_mode() requires an instance")
    tree = build(type(instance))
    log.debug("Wrapping instance", tree=tree.name)
    return DualModeProxy(instance, tree, callback_adapter or adapt)
