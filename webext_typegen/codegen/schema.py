"""
Schema object model for the declaration compiler.

Type, function and event nodes stay as the plain dicts parsed from the
schema files, since merging and customizations operate on arbitrary
keys. This module adds the namespace record, the compile context that
threads identifiers through a conversion, and the merge helpers shared
by the merger and the compiler.
"""

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Optional

# Escape hatches for types the schema format cannot express
TYPE_OVERRIDE_KEY = "converterTypeOverride"
ADDITIONAL_TYPE_KEY = "converterAdditionalType"

# Namespace sections that hold ordered member lists
LIST_SECTIONS = ("types", "functions", "events")

# Primitive schema types with a direct counterpart
SIMPLE_TYPES = {"string", "integer", "number", "boolean", "any", "null"}

# Returns that already admit "nothing"
ALREADY_OPTIONAL_RETURNS = {"any", "undefined", "void"}

# Marker telling merge_with to fall back to the default merge
DEFAULT_MERGE = object()

Customizer = Callable[[Any, Any, str], Any]


@dataclass
class Namespace:
    """All fragments of one namespace, merged."""

    namespace: str
    description: Optional[str] = None
    types: List[Dict[str, Any]] = field(default_factory=list)
    properties: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    functions: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)
    allowed_contexts: List[str] = field(default_factory=list)
    import_from: Optional[str] = None

    def section(self, name: str) -> Any:
        """Get a section by its schema key (``types``, ``properties``...)."""
        attr = {"allowedContexts": "allowed_contexts", "$import": "import_from"}.get(
            name, name
        )
        if attr not in self.__dataclass_fields__ or attr == "namespace":
            raise KeyError(f"Unknown namespace section: {name}")
        return getattr(self, attr)

    def find_type(self, type_id: str) -> Optional[Dict[str, Any]]:
        """Get a type of this namespace by id."""
        for type_ in self.types:
            if type_.get("id") == type_id:
                return type_
        return None

    def copy(self) -> "Namespace":
        """Deep copy, so emission never writes into the merged table."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class Override:
    """Tagged override variant of a type node."""

    expression: Optional[str] = None
    declaration: Optional[str] = None


def override_of(node: Dict[str, Any]) -> Optional[Override]:
    """Return the override carried by a node, if any."""
    if node.get(TYPE_OVERRIDE_KEY):
        return Override(expression=node[TYPE_OVERRIDE_KEY])
    if node.get(ADDITIONAL_TYPE_KEY):
        return Override(declaration=node[ADDITIONAL_TYPE_KEY])
    return None


@dataclass
class NamespaceScope:
    """Per-namespace state of one emission: record, sink and warnings."""

    namespace: Namespace
    sink: Any
    warnings: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.namespace.namespace


@dataclass(frozen=True)
class CompileContext:
    """
    Explicit context for a single compile call.

    ``node_id`` is the identifier synthesized by the parent for the node
    being compiled; it takes precedence over the node's own ``id``.
    """

    scope: NamespaceScope
    node_id: Optional[str] = None
    is_root: bool = False

    @property
    def namespace(self) -> str:
        return self.scope.name

    def child(self, node_id: Optional[str] = None) -> "CompileContext":
        """Context for a nested, non-root node."""
        return replace(self, node_id=node_id, is_root=False)

    def as_root(self, node_id: Optional[str] = None) -> "CompileContext":
        return replace(self, node_id=node_id, is_root=True)

    def identifier(self, node: Dict[str, Any]) -> Optional[str]:
        """Effective identifier of ``node`` in this context."""
        return self.node_id or node.get("id")


def is_plain_object(value: Any) -> bool:
    return isinstance(value, dict)


def iter_plain_objects(item: Any) -> Iterator[Dict[str, Any]]:
    """Yield every dict nested anywhere inside lists and dicts."""
    if isinstance(item, list):
        for element in item:
            yield from iter_plain_objects(element)
    elif isinstance(item, dict):
        yield item
        for value in list(item.values()):
            yield from iter_plain_objects(value)


def same_member(a: Any, b: Any) -> bool:
    """Array dedupe rule: equal ``id`` if present, else equal ``name``."""
    if not isinstance(a, dict) or not isinstance(b, dict):
        return False
    if a.get("id") is not None and a.get("id") == b.get("id"):
        return True
    return a.get("name") is not None and a.get("name") == b.get("name")


def unique_members(items: List[Any]) -> List[Any]:
    """Drop later items that are the same member as an earlier one."""
    result: List[Any] = []
    for item in items:
        if not any(same_member(kept, item) for kept in result):
            result.append(item)
    return result


def merge_with(
    target: Dict[str, Any], source: Dict[str, Any], customizer: Customizer
) -> Dict[str, Any]:
    """
    Recursively merge ``source`` into ``target`` in place.

    For every key the customizer decides the merged value; when it
    returns DEFAULT_MERGE, nested dicts merge recursively (with the same
    customizer) and any other value from ``source`` is copied over.
    ``None`` in ``source`` never overwrites.
    """
    for key, src_value in source.items():
        if src_value is None:
            continue
        obj_value = target.get(key)
        merged = customizer(obj_value, src_value, key)
        if merged is not DEFAULT_MERGE:
            target[key] = merged
        elif isinstance(obj_value, dict) and isinstance(src_value, dict):
            merge_with(obj_value, src_value, customizer)
        else:
            target[key] = copy.deepcopy(src_value)
    return target


def extend_customizer(obj_value: Any, src_value: Any, key: str) -> Any:
    """Merge rule for ``$extend`` groups: concatenate, first value wins."""
    if isinstance(obj_value, list):
        if isinstance(src_value, list):
            return obj_value + copy.deepcopy(src_value)
        return obj_value
    if obj_value is not None and not isinstance(obj_value, dict):
        return obj_value
    return DEFAULT_MERGE


def import_customizer(obj_value: Any, src_value: Any, key: str) -> Any:
    """Merge rule for ``$import``: own scalars win, arrays dedupe."""
    if isinstance(obj_value, list):
        if isinstance(src_value, list):
            return unique_members(obj_value + copy.deepcopy(src_value))
        return obj_value
    if obj_value is not None and not isinstance(obj_value, dict):
        return obj_value
    return DEFAULT_MERGE


def namespace_import_customizer(obj_value: Any, src_value: Any, key: str) -> Any:
    """Merge rule inside namespace-level imports: arrays dedupe."""
    if isinstance(obj_value, list) and isinstance(src_value, list):
        return unique_members(obj_value + copy.deepcopy(src_value))
    return DEFAULT_MERGE
