import typing as t

from pydantic import BaseModel, ConfigDict, Field

CALLBACK_MODE = "callback"


class MethodDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    value: t.Callable[..., t.Any]
    mode: str = CALLBACK_MODE

    @property
    def is_callback(self) -> bool:
        return self.mode == CALLBACK_MODE


class CapabilityTree(BaseModel):
    """
    Introspected description of a class's operations and nested sub-definitions.

    Attribute assignment is frozen, but ``methods`` and ``objects`` are plain
    dicts so that ``dualmode.tree.build`` can fill an accumulator tree in
    place. ``build`` is their only writer and allocates new dicts on every
    call, so editing a returned tree never leaks into later builds. Callers
    treat them as read-only.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    definition: type | None = Field(default=None, exclude=True)
    methods: dict[str, MethodDescriptor] = Field(default_factory=dict)
    objects: dict[str, "CapabilityTree"] = Field(default_factory=dict)

    def walk(self, path: str | None = None) -> t.Iterator[tuple[str, "CapabilityTree"]]:
        """
        Yield ``(dotted_path, node)`` pairs, depth first, starting with this node.
        """
        path = path or self.name
        yield path, self
        for key, subtree in self.objects.items():
            yield from subtree.walk(path=f"{path}.{key}")


class CapabilityManifest(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    methods: dict[str, str] = Field(default_factory=dict)
    objects: dict[str, type] = Field(default_factory=dict)
