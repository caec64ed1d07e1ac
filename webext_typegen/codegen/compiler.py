"""
Type expression compiler.

Converts one schema type node into a type expression. Identifiers that
parents synthesize for nested nodes travel in the CompileContext, so
input nodes are never written to.
"""

import copy
import json
from typing import Any, Dict, List, Optional

from .config import ENUM_STYLES
from .docs import DocBuilder
from .errors import SchemaCompileError
from .functions import EventCompiler, FunctionCompiler
from .naming import enum_member_name, hoisted_name
from .resolver import ReferenceResolver
from .schema import (
    SIMPLE_TYPES,
    CompileContext,
    Override,
    import_customizer,
    merge_with,
    override_of,
)


def _enum_value(entry: Any) -> str:
    return entry["name"] if isinstance(entry, dict) else entry


def _present(node: Dict[str, Any], key: str) -> bool:
    """Container fields count as set even when empty."""
    return node.get(key) is not None


class TypeCompiler:
    """Compiles schema type nodes to declaration type expressions."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        docs: DocBuilder,
        enum_style: str = "union",
    ):
        if enum_style not in ENUM_STYLES:
            raise ValueError(f"Unknown enum style: {enum_style}")
        self.resolver = resolver
        self.docs = docs
        self.enum_style = enum_style
        self.functions = FunctionCompiler(self)
        self.events = EventCompiler(self)

    def compile(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        """
        Compile a type node.

        Args:
            node: Schema type node
            ctx: Identifier, root flag and namespace scope for this node

        Returns:
            Type expression

        Raises:
            SchemaCompileError: If no rule applies to the node
        """
        override = override_of(node)
        if override is not None:
            out = self._compile_override(node, override, ctx)
            if out is not None:
                return out

        if _present(node, "choices"):
            out = self._compile_choices(node, ctx)
        elif _present(node, "enum"):
            out = self._compile_enum(node, ctx)
        elif node.get("type"):
            out = self._compile_typed(node, ctx)
        elif node.get("$ref"):
            out = self.resolver.resolve(node["$ref"], ctx)
        elif "value" in node:
            out = self._compile_value(node["value"])
        else:
            out = ""

        if not out:
            raise SchemaCompileError(node)
        return out

    def _compile_override(
        self, node: Dict[str, Any], override: Override, ctx: CompileContext
    ) -> Optional[str]:
        if override.expression is not None:
            return override.expression
        ident = ctx.identifier(node)
        if ident is None:
            return None
        ctx.scope.sink.push(override.declaration)
        return ident

    def _compile_choices(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        choices: List[Dict[str, Any]] = []
        enums: List[Any] = []
        for choice in node["choices"]:
            if _present(choice, "enum"):
                enums.extend(choice["enum"])
            else:
                choices.append(choice)

        # All enum choices become one enum named after the parent
        if enums:
            merged_enum: Dict[str, Any] = {"enum": enums}
            ident = ctx.identifier(node)
            if ident is not None:
                merged_enum["id"] = ident
            choices.append(merged_enum)

        compiled: List[str] = []
        for choice in choices:
            text = self.compile(choice, ctx.child())
            # "X | any" is just any
            if text == "any":
                text = "object"
            if text not in compiled:
                compiled.append(text)
        return " | ".join(compiled)

    # Enums

    def _compile_enum(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        ident = ctx.identifier(node) or node.get("name")

        if ctx.is_root:
            return self.enum_body(node)

        if ident is None:
            return " | ".join(json.dumps(_enum_value(v), ensure_ascii=False) for v in node["enum"])

        name = hoisted_name(ident)
        comment = self.docs.comment_from_schema(node)
        ctx.scope.sink.push(comment + self.enum_declaration(name, self.enum_body(node)))
        return name

    def enum_body(self, node: Dict[str, Any]) -> str:
        """Root rendering of an enum: a literal union ending in ``;`` or an enum body."""
        entries = []
        for entry in node["enum"]:
            if isinstance(entry, dict):
                entries.append((self.docs.comment_from_schema(entry), entry.get("name")))
            else:
                entries.append(("", entry))

        if self.enum_style == "enum":
            lines = []
            for comment, value in entries:
                for line in comment.splitlines():
                    lines.append(f"    {line}")
                literal = json.dumps(value, ensure_ascii=False)
                lines.append(f"    {enum_member_name(value)} = {literal},")
            return "{\n" + "\n".join(lines) + "\n}"

        multiline = len(entries) > 2 or any("\n" in comment for comment, _ in entries)
        out = "\n" if multiline else ""
        for i, (comment, value) in enumerate(entries):
            out += comment
            out += "|" if i > 0 else ""
            out += json.dumps(value, ensure_ascii=False)
            if multiline and i != len(entries) - 1:
                out += "\n"
        return out + ";"

    def enum_declaration(self, name: str, body: str) -> str:
        if self.enum_style == "enum":
            return f"enum {name} {body}"
        return f"type {name} = {body}"

    # Typed nodes

    def _compile_typed(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        type_ = node["type"]
        if type_ == "object":
            return self._compile_object(node, ctx)
        if type_ == "array":
            return self._compile_array(node, ctx)
        if type_ == "function":
            return self.functions.compile_inline(node, ctx)
        if type_ in SIMPLE_TYPES:
            return "number" if type_ == "integer" else type_
        return ""

    def _compile_object(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        ident = ctx.identifier(node)

        if _present(node, "functions") or _present(node, "events"):
            return self._compile_class(node, ctx)

        if _present(node, "properties") or _present(node, "patternProperties"):
            members = self.compile_members(node, ctx)
            if not members:
                return "object"
            return "{\n" + ";\n".join(members) + ";\n}"

        instance_of = node.get("isInstanceOf")
        additional = node.get("additionalProperties")
        if instance_of:
            if isinstance(additional, dict) and additional.get("type") == "any":
                if instance_of.lower() == "window":
                    return instance_of
                return f"object/*{instance_of}*/"
            return self.resolver.resolve(instance_of, ctx)

        if isinstance(additional, dict):
            return f"{{[key: string]: {self.compile(additional, ctx.child(ident))}}}"

        return "object"

    def _compile_class(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        node = self._with_import(node, ctx)
        members = self.compile_members(node, ctx, imported=True)
        for func in node.get("functions") or []:
            members.extend(self.functions.compile_members(func, ctx))
        for event in node.get("events") or []:
            members.append(self.events.compile(event, ctx, top_level=False))
        return "{\n" + ";\n".join(members) + ";\n}"

    def _with_import(self, node: Dict[str, Any], ctx: CompileContext) -> Dict[str, Any]:
        """Copy of ``node`` merged with the local type its ``$import`` names."""
        target_ref = node.get("$import")
        if not target_ref:
            return node
        # Only the first segment is compared (theme.json imports manifest.ManifestBase)
        target_id = target_ref.split(".")[0]
        target = next(
            (
                t
                for t in ctx.scope.namespace.types
                if t.get("id") == target_id or t.get("name") == target_id
            ),
            None,
        )
        if target is None:
            return node
        return merge_with(copy.deepcopy(node), target, import_customizer)

    def compile_members(
        self, node: Dict[str, Any], ctx: CompileContext, imported: bool = False
    ) -> List[str]:
        """
        Compile the properties and pattern properties of an object node.

        Args:
            node: Object type node
            ctx: Context of the object node itself
            imported: Whether ``$import`` was already merged into ``node``

        Returns:
            One member declaration per property
        """
        if not imported:
            node = self._with_import(node, ctx)
        ident = ctx.identifier(node)
        members = []

        for name, prop in (node.get("properties") or {}).items():
            if ident is None:
                child_id = None
            elif name == "properties":
                child_id = ident
            else:
                child_id = f"{ident}_{name}"
            optional = "?" if prop.get("optional") else ""
            members.append(
                f"{self.docs.comment_from_schema(prop)}{name}{optional}: "
                f"{self.compile(prop, ctx.child(child_id))}"
            )

        for pattern, prop in (node.get("patternProperties") or {}).items():
            key_type = "number" if "\\d" in pattern and "a-z" not in pattern else "string"
            members.append(f"[key: {key_type}]: {self.compile(prop, ctx.child())}")

        return members

    def _compile_array(self, node: Dict[str, Any], ctx: CompileContext) -> str:
        items = node.get("items")
        min_items = node.get("minItems")
        if min_items and min_items == node.get("maxItems"):
            element = self.compile(items or {}, ctx.child())
            return "[" + ", ".join([element] * min_items) + "]"
        if not items:
            return ""
        element = self.compile(items, ctx.child(ctx.identifier(node)))
        if any(c in element for c in ("\n", ";", ",", '"')):
            return f"Array<{element}>"
        return f"{element}[]"

    @staticmethod
    def _compile_value(value: Any) -> str:
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        return "object"

