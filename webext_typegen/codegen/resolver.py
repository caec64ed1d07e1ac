"""
Reference resolution and the per-namespace additional-type sink.
"""

from typing import Dict, List, Mapping, Optional, Set, Tuple

from ..logging_config import get_logger
from .schema import CompileContext, Namespace

logger = get_logger(__name__)


class AdditionalTypeSink:
    """Accumulates helper declarations synthesized while compiling a namespace."""

    def __init__(self):
        self._declarations: List[str] = []

    def push(self, declaration: str) -> None:
        self._declarations.append(declaration)

    def declarations(self) -> List[str]:
        """Pushed declarations, duplicates removed, first occurrence kept."""
        seen: Set[str] = set()
        unique = []
        for declaration in self._declarations:
            if declaration not in seen:
                seen.add(declaration)
                unique.append(declaration)
        return unique

    def clear(self) -> None:
        self._declarations.clear()

    def __len__(self) -> int:
        return len(self.declarations())

    def __contains__(self, declaration: str) -> bool:
        return declaration in self._declarations


class ReferenceResolver:
    """Turns ``[namespace.]identifier`` references into printable names."""

    def __init__(
        self,
        namespaces: Mapping[str, Namespace],
        namespace_aliases: Optional[Mapping[str, str]] = None,
    ):
        self.namespaces = namespaces
        self.namespace_aliases: Dict[str, str] = dict(namespace_aliases or {})
        self.unresolved: Set[str] = set()

    def resolve_namespace(self, name: str) -> str:
        return self.namespace_aliases.get(name, name)

    def split(self, ref: str) -> Tuple[Optional[str], str]:
        """Split a reference into (aliased namespace or None, identifier)."""
        if "." not in ref:
            return None, ref
        namespace, identifier = ref.rsplit(".", 1)
        return self.resolve_namespace(namespace), identifier

    def resolve(self, ref: str, ctx: CompileContext) -> str:
        """
        Resolve a reference as seen from the namespace being compiled.

        Same-namespace references print unqualified. References into an
        unknown namespace (or to an unknown local type) print the bare
        identifier and get a ``type X = any;`` placeholder in the sink.
        """
        namespace, identifier = self.split(ref)

        if namespace == ctx.namespace:
            return identifier
        if namespace is not None and namespace in self.namespaces:
            return f"{namespace}.{identifier}"

        if ctx.scope.namespace.find_type(identifier) is None:
            message = f'Cannot find reference "{ref}", assuming the browser knows better.'
            logger.warning(message)
            self.unresolved.add(ref)
            ctx.scope.warnings.append(message)
            ctx.scope.sink.push(f"type {identifier} = any;")

        return identifier
