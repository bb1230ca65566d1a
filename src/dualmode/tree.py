"""
Capability tree builder.
Walks a class and the nested classes reachable from its uppercase attributes,
recording every lowercase function as an operation.
Identifier casing is the only discovery signal unless the class carries an
explicit ``declare`` manifest.
"""

import inspect
import re
import typing as t

import structlog

from dualmode.exceptions import ArgumentError
from dualmode.models import CALLBACK_MODE, CapabilityManifest, CapabilityTree, MethodDescriptor

log = structlog.get_logger(__name__)

MANIFEST_ATTR = "__capabilities__"
META_ATTR = "meta"

_METHOD_NAME = re.compile(pattern=r"^[a-z]")
_OBJECT_NAME = re.compile(pattern=r"^[A-Z]")


def build(*args: t.Any) -> CapabilityTree:
    """
    Build the capability tree of a class.

    Parameters
    ----------
    *args : typing.Any
        ``(definition)``, ``(definition, name)`` or ``(definition, name, tree)``.
        With one argument the tree is named after the class. With three, the
        given tree is populated in place and returned.

    Returns
    -------
    CapabilityTree
        Tree mirroring the class's operations and nested definitions.

    Raises
    ------
    ArgumentError
        If called with anything other than 1, 2 or 3 arguments, or if
        ``definition`` is not a class.
    """
    match len(args):
        case 1:
            (definition,) = args
            _ensure_class(definition=definition)
            tree = CapabilityTree(name=definition.__name__, definition=definition)
        case 2:
            definition, name = args
            _ensure_class(definition=definition)
            tree = CapabilityTree(name=name, definition=definition)
        case 3:
            definition, name, tree = args
            _ensure_class(definition=definition)
            if not isinstance(tree, CapabilityTree):
                raise ArgumentError(f"Expected a CapabilityTree accumulator, got {type(tree)!r}")
        case _:
            raise ArgumentError(f"build() takes 1 to 3 arguments ({len(args)} given)")

    manifest = definition.__dict__.get(MANIFEST_ATTR)
    if isinstance(manifest, CapabilityManifest):
        _populate_from_manifest(definition=definition, tree=tree, manifest=manifest)
    else:
        _populate_from_names(definition=definition, tree=tree)

    log.debug(
        "Built capability tree",
        tree=tree.name,
        methods=sorted(tree.methods),
        objects=sorted(tree.objects),
    )
    return tree


def _ensure_class(definition: t.Any) -> None:
    if not inspect.isclass(definition):
        raise ArgumentError(f"Expected a class definition, got {definition!r}")


def _iter_members(definition: type) -> t.Iterator[tuple[str, t.Any]]:
    """
    Yield raw class attributes, nearest definition in the MRO first.
    """
    seen: set[str] = set()
    for klass in definition.__mro__:
        if klass is object:
            continue
        for key, value in vars(klass).items():
            if key in seen:
                continue
            seen.add(key)
            yield key, value


def _method_mode(definition: type, name: str) -> str:
    meta = getattr(definition, META_ATTR, None) or {}
    entry = meta.get(name) if isinstance(meta, t.Mapping) else None
    if not isinstance(entry, t.Mapping):
        return CALLBACK_MODE
    return entry.get("type") or CALLBACK_MODE


def _populate_from_names(definition: type, tree: CapabilityTree) -> None:
    for key, value in _iter_members(definition=definition):
        if _METHOD_NAME.match(key) and inspect.isfunction(value):
            tree.methods[key] = MethodDescriptor(
                name=key,
                value=value,
                mode=_method_mode(definition=definition, name=key),
            )
        elif _OBJECT_NAME.match(key) and inspect.isclass(value):
            tree.objects[key] = build(value, key, CapabilityTree(name=key, definition=value))


def _populate_from_manifest(
    definition: type, tree: CapabilityTree, manifest: CapabilityManifest
) -> None:
    for key, mode in manifest.methods.items():
        tree.methods[key] = MethodDescriptor(name=key, value=getattr(definition, key), mode=mode)
    for key, value in manifest.objects.items():
        tree.objects[key] = build(value, key, CapabilityTree(name=key, definition=value))


def declare(
    methods: t.Iterable[str] | t.Mapping[str, str] | None = None,
    objects: t.Mapping[str, type] | None = None,
) -> t.Callable[[type], type]:
    """
    Register a class's operations and nested capabilities explicitly.

    Parameters
    ----------
    methods : typing.Iterable[str] | typing.Mapping[str, str] | None, optional
        Operation names (all in ``"callback"`` mode) or a mapping of operation
        name to mode.
    objects : typing.Mapping[str, type] | None, optional
        Nested capability name to class. Live sub-instances are looked up at
        the lower-cased name.

    Returns
    -------
    typing.Callable[[type], type]
        Class decorator attaching the manifest.

    Raises
    ------
    ArgumentError
        If a listed operation is not a function on the class, or a listed
        nested capability is not a class.
    """
    if isinstance(methods, t.Mapping):
        method_modes = dict(methods)
    else:
        method_modes = {name: CALLBACK_MODE for name in methods or ()}
    object_defs = dict(objects or {})

    def decorator(definition: type) -> type:
        for name in method_modes:
            if not inspect.isfunction(inspect.getattr_static(definition, name, None)):
                raise ArgumentError(f"{definition.__name__}.{name} is not an operation")
        for name, value in object_defs.items():
            if not inspect.isclass(value):
                raise ArgumentError(f"{definition.__name__}.{name} is not a class: {value!r}")
        manifest = CapabilityManifest(methods=method_modes, objects=object_defs)
        setattr(definition, MANIFEST_ATTR, manifest)
        return definition

    return decorator
