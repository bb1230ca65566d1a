"""
Patch a live instance so its callback-style operations become dual-mode.
A dual-mode operation forwards to the original when called with a trailing
callback, and returns a future from the callback adapter otherwise.
The patcher walks the capability tree and the live object graph together,
reaching nested sub-instances through the lower-cased capability name.
"""

import functools
import typing as t

import structlog

from dualmode.adapter import CallbackAdapter, adapt
from dualmode.exceptions import ArgumentError, MissingCapabilityError
from dualmode.logging import capability_context
from dualmode.models import CapabilityTree
from dualmode.tree import build

log = structlog.get_logger(__name__)

CALLBACK_KWARG = "callback"


def has_callback(args: tuple[t.Any, ...], kwargs: dict[str, t.Any]) -> bool:
    if args and callable(args[-1]):
        return True
    return callable(kwargs.get(CALLBACK_KWARG))


def make_dual_mode(
    fn: t.Callable[..., t.Any], callback_adapter: CallbackAdapter
) -> t.Callable[..., t.Any]:
    """
    Wrap a bound callback-style operation into a dual-mode one.

    Parameters
    ----------
    fn : typing.Callable[..., typing.Any]
        Original operation, already bound to its instance.
    callback_adapter : CallbackAdapter
        Called with a one-argument function when no callback is supplied.

    Returns
    -------
    typing.Callable[..., typing.Any]
        Wrapper returning ``fn``'s own result when a callback is passed,
        and the adapter's future otherwise.
    """

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        if has_callback(args=args, kwargs=kwargs):
            return fn(*args, **kwargs)
        # An explicit callback=None keeps the callback in its keyword slot
        if CALLBACK_KWARG in kwargs:
            return callback_adapter(
                lambda callback: fn(*args, **{**kwargs, CALLBACK_KWARG: callback})
            )
        return callback_adapter(lambda callback: fn(*args, callback, **kwargs))

    return wrapper


def promisify(
    instance: t.Any = None,
    callback_adapter: CallbackAdapter | None = None,
    *,
    strict: bool = False,
) -> None:
    """
    Make every callback-mode operation of ``instance`` dual-mode, in place.

    Parameters
    ----------
    instance : typing.Any
        Live object to patch. Nested sub-instances are patched too.
    callback_adapter : CallbackAdapter | None, optional
        Future factory used when no callback is given. Defaults to ``adapt``.
    strict : bool, optional
        Raise ``MissingCapabilityError`` when a nested capability has no live
        sub-instance, instead of skipping it.

    Raises
    ------
    ArgumentError
        If ``instance`` is missing.

    Notes
    -----
    Patching the same instance twice wraps its operations twice.
    """
    if instance is None:
        raise ArgumentError("promisify() requires an instance")
    callback_adapter = callback_adapter or adapt

    tree = build(type(instance))
    _patch(
        target=instance,
        tree=tree,
        callback_adapter=callback_adapter,
        path=tree.name,
        strict=strict,
    )


def _patch(
    target: t.Any,
    tree: CapabilityTree,
    callback_adapter: CallbackAdapter,
    path: str,
    strict: bool,
) -> None:
    with capability_context(path=path):
        for name, method in tree.methods.items():
            if not method.is_callback:
                log.debug("Leaving operation as is", operation=name, mode=method.mode)
                continue
            original = getattr(target, method.name)
            dual = make_dual_mode(fn=original, callback_adapter=callback_adapter)
            setattr(target, method.name, dual)
            log.debug("Patched operation", operation=name)

        for name, subtree in tree.objects.items():
            accessor = name.lower()
            child = getattr(target, accessor, None)
            child_path = f"{path}.{name}"
            if child is None:
                if strict:
                    raise MissingCapabilityError(accessor=accessor, path=child_path)
                log.debug("Skipping unreachable capability", accessor=accessor, capability=name)
                continue
            _patch(
                target=child,
                tree=subtree,
                callback_adapter=callback_adapter,
                path=child_path,
                strict=strict,
            )
