"""
Schema merger.

Folds the namespace fragments of every schema file into one table and
resolves ``$extend``, type-level ``$import`` and namespace-level
``$import``.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..logging_config import get_logger
from .schema import (
    Namespace,
    extend_customizer,
    import_customizer,
    iter_plain_objects,
    merge_with,
    namespace_import_customizer,
    unique_members,
)

logger = get_logger(__name__)

Fragment = Tuple[str, List[Dict[str, Any]]]
NamespaceTable = Dict[str, Namespace]


class SchemaMerger:
    """Builds and resolves the namespace table."""

    def __init__(self, namespace_aliases: Optional[Mapping[str, str]] = None):
        self.namespace_aliases: Dict[str, str] = dict(namespace_aliases or {})

    def build(self, fragments: Iterable[Fragment]) -> NamespaceTable:
        """
        Merge namespace records from every schema file.

        Args:
            fragments: ``(filename, [namespace records])`` in load order

        Returns:
            Table keyed by alias-resolved namespace name
        """
        table: NamespaceTable = {}
        for filename, records in fragments:
            for record in records:
                name = self.namespace_aliases.get(record["namespace"], record["namespace"])
                namespace = table.get(name)
                if namespace is None:
                    namespace = Namespace(namespace=name, description=record.get("description"))
                    table[name] = namespace
                elif record.get("description"):
                    namespace.description = record["description"]

                logger.debug("Merging namespace %s from %s", name, filename)
                namespace.types.extend(record.get("types") or [])
                namespace.properties.update(record.get("properties") or {})
                namespace.functions.extend(record.get("functions") or [])
                namespace.events.extend(record.get("events") or [])
                namespace.permissions.extend(record.get("permissions") or [])
                namespace.allowed_contexts.extend(record.get("allowedContexts") or [])
                if record.get("$import"):
                    namespace.import_from = record["$import"]
        return table

    @staticmethod
    def collapse_extended_types(types: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Merge every type into the first type sharing its id or ``$extend`` target.

        Arrays concatenate, the first scalar wins and ``$extend`` itself is
        dropped. The input list is not modified.
        """
        collapsed: Dict[str, Dict[str, Any]] = {}
        for type_ in copy.deepcopy(types):
            name = type_.pop("$extend", None) or type_.get("id")
            if name in collapsed:
                merge_with(collapsed[name], type_, extend_customizer)
            else:
                collapsed[name] = type_
        return list(collapsed.values())

    @staticmethod
    def extend_imported_types(types: List[Dict[str, Any]]) -> None:
        """Merge the type named by each ``$import`` into the importing type."""
        for type_ in types:
            if not type_.get("$import"):
                continue
            # Only the first segment is compared (theme.json imports manifest.ManifestBase)
            target_id = type_["$import"].split(".")[0]
            target = next(
                (t for t in types if t.get("id") == target_id or t.get("name") == target_id),
                None,
            )
            if target is not None and target is not type_:
                merge_with(type_, target, import_customizer)

    def resolve_namespace(self, table: NamespaceTable, name: str) -> Namespace:
        """
        Copy of a namespace ready for emission.

        Applies the namespace-level ``$import`` chain, then collapses
        ``$extend`` groups and merges type-level imports.
        """
        namespace = self._with_namespace_import(table, name, set())
        namespace.types = self.collapse_extended_types(namespace.types)
        self.extend_imported_types(namespace.types)
        return namespace

    def _with_namespace_import(
        self, table: NamespaceTable, name: str, seen: Set[str]
    ) -> Namespace:
        seen.add(name)
        namespace = table[name].copy()
        source_name = namespace.import_from
        if not source_name or source_name not in table or source_name in seen:
            return namespace

        source = self._with_namespace_import(table, source_name, seen)
        logger.debug("Namespace %s imports %s", name, source_name)
        namespace.types = unique_members(namespace.types + source.types)
        namespace.functions = unique_members(namespace.functions + source.functions)
        namespace.events = unique_members(namespace.events + source.events)
        namespace.allowed_contexts = namespace.allowed_contexts + source.allowed_contexts
        merge_with(namespace.properties, source.properties, namespace_import_customizer)
        return namespace

    @staticmethod
    def mark_unsupported_optional(table: NamespaceTable) -> int:
        """Mark every node flagged ``unsupported`` as optional; return the count."""
        count = 0
        for namespace in table.values():
            sections = [namespace.types, namespace.properties, namespace.functions, namespace.events]
            for node in iter_plain_objects(sections):
                if node.get("unsupported"):
                    node["optional"] = True
                    count += 1
        return count
