"""
Declaration generator.

Orchestrates a run: merge the schema fragments, apply customizations,
then emit one declaration block per namespace after the file header.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..customizations import firefox_customizations
from ..desc_to_doc import DescriptionRenderer
from ..logging_config import get_logger
from ..utils import collect_schemas
from .compiler import TypeCompiler
from .config import GeneratorConfig
from .customize import CustomizationLog
from .docs import DocBuilder, DocRenderer
from .errors import CustomizationError, GeneratorError, SchemaCompileError
from .merger import Fragment, NamespaceTable, SchemaMerger
from .naming import convert_name
from .resolver import AdditionalTypeSink, ReferenceResolver
from .schema import CompileContext, NamespaceScope
from .templates import TemplateEngine, create_template_engine

logger = get_logger(__name__)

__all__ = [
    "CustomizationError",
    "DeclarationGenerator",
    "GenerationResult",
    "GeneratorError",
    "SchemaCompileError",
    "generate_code",
]


class DeclarationGenerator:
    """Generates a declaration file from browser extension schemas."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        customizations: Optional[CustomizationLog] = None,
        renderer: Optional[DocRenderer] = None,
    ):
        """
        Initialize the generator.

        Args:
            config: Generation settings (defaults when omitted)
            customizations: Commands applied after merging; the Firefox
                patch set when omitted
            renderer: Description renderer for doc comments
        """
        self.config = config or GeneratorConfig()
        self.customizations = customizations
        self.merger = SchemaMerger(self.config.namespace_aliases)
        self.docs = DocBuilder(renderer or DescriptionRenderer())
        self.table: NamespaceTable = {}
        self.warnings: List[str] = []
        self._load_warnings: List[str] = []
        self.unresolved_references: List[str] = []
        self._template_engine: Optional[TemplateEngine] = None

    @property
    def template_engine(self) -> TemplateEngine:
        if self._template_engine is None:
            template_dir = Path(self.config.template_dir) if self.config.template_dir else None
            self._template_engine = create_template_engine(template_dir)
        return self._template_engine

    def load_schema_dirs(self, folders: Optional[Sequence[Union[str, Path]]] = None) -> NamespaceTable:
        """Load every schema file of the given (or configured) folders."""
        folders = folders if folders is not None else self.config.schema_dirs
        return self.load(collect_schemas(folders))

    def load(self, fragments: Iterable[Fragment]) -> NamespaceTable:
        """
        Build the namespace table and prepare it for emission.

        Args:
            fragments: ``(filename, [namespace records])`` pairs

        Returns:
            The merged, customized namespace table
        """
        self._load_warnings = []
        table = self.merger.build(fragments)

        if self.config.mark_unsupported_optional:
            count = self.merger.mark_unsupported_optional(table)
            logger.debug("Marked %d unsupported members optional", count)

        if self.config.apply_customizations:
            customizations = self.customizations
            if customizations is None:
                customizations = firefox_customizations()
            self._load_warnings.extend(
                customizations.apply(table, strict=self.config.strict_customizations)
            )

        self.table = table
        return table

    def generate(self) -> str:
        """
        Emit the declaration text for the loaded table.

        Raises:
            SchemaCompileError: If a type node cannot be compiled
        """
        resolver = ReferenceResolver(self.table, self.config.namespace_aliases)
        compiler = TypeCompiler(resolver, self.docs, self.config.enum_style)
        self.warnings = list(self._load_warnings)

        out = self.template_engine.render_template(
            "header.d.ts.j2",
            {"firefox_version": self.config.firefox_version, "root": self.config.root_namespace},
        )
        for name in self.table:
            out += self.emit_namespace(name, compiler)

        self.unresolved_references = sorted(resolver.unresolved)
        # Drop the newline after the last block
        return out[:-1]

    def emit_namespace(self, name: str, compiler: TypeCompiler) -> str:
        """Emit the declaration block of one namespace."""
        namespace = self.merger.resolve_namespace(self.table, name)
        scope = NamespaceScope(namespace, AdditionalTypeSink())
        ctx = CompileContext(scope)
        logger.debug("Emitting namespace %s", name)

        types = [self.emit_type(type_, compiler, ctx) for type_ in namespace.types]
        properties = [
            self.emit_property(prop_name, prop, compiler, ctx)
            for prop_name, prop in namespace.properties.items()
        ]
        functions = [compiler.functions.compile_declaration(f, ctx) for f in namespace.functions]
        events = [compiler.events.compile(e, ctx) for e in namespace.events]

        sections = []
        if types:
            sections.append(f"/* {name} types */\n" + "\n\n".join(types))
        additional = scope.sink.declarations()
        if additional:
            sections.append("\n\n".join(additional))
        if properties:
            sections.append(f"/* {name} properties */\n" + "\n\n".join(properties))
        if functions:
            sections.append(f"/* {name} functions */\n" + "\n\n".join(functions))
        if events:
            sections.append(f"/* {name} events */\n" + "\n\n".join(events))

        self.warnings.extend(scope.warnings)
        return self.template_engine.render_template(
            "namespace.d.ts.j2",
            {
                "doc": self.docs.namespace_comment(namespace),
                "root": self.config.root_namespace,
                "name": namespace.namespace,
                "body": "\n\n".join(sections),
            },
        )

    def emit_type(self, type_: Dict[str, Any], compiler: TypeCompiler, ctx: CompileContext) -> str:
        """Emit a root type as an interface, an enum alias or a type alias."""
        type_id = type_.get("id") or type_.get("name")
        text = compiler.compile(type_, ctx.as_root())
        # A type that compiles to its own name is not checked at all
        if text == type_id:
            text = "any"
        comment = self.docs.comment_from_schema(type_)

        is_class = type_.get("functions") is not None or type_.get("events") is not None
        if is_class or (type_.get("type") == "object" and not type_.get("isInstanceOf")):
            if text.startswith("{"):
                return f"{comment}interface {type_id} {text}"
            return f"{comment}type {type_id} = {text};"
        if type_.get("enum") is not None:
            return comment + compiler.enum_declaration(convert_name(type_id), text)
        return f"{comment}type {type_id} = {text};"

    def emit_property(
        self, name: str, prop: Dict[str, Any], compiler: TypeCompiler, ctx: CompileContext
    ) -> str:
        optional = " | undefined" if prop.get("optional") else ""
        return (
            f"{self.docs.comment_from_schema(prop)}const {name}: "
            f"{compiler.compile(prop, ctx.child())}{optional};"
        )


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self, code: str, warnings: List[str] = None, metadata: Dict[str, Any] = None
    ):
        """
        Initialize generation result.

        Args:
            code: Generated declarations
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def generate_code(
    generator: DeclarationGenerator, fragments: Optional[Iterable[Fragment]] = None
) -> GenerationResult:
    """
    Generate declarations with error handling.

    Args:
        generator: Declaration generator instance
        fragments: Schema fragments to load first; when omitted the
            generator's configured schema folders are loaded, unless a
            table is already loaded

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    try:
        if fragments is not None:
            generator.load(fragments)
        elif not generator.table:
            generator.load_schema_dirs()

        code = generator.generate()

        table = generator.table
        metadata = {
            "firefox_version": generator.config.firefox_version,
            "root_namespace": generator.config.root_namespace,
            "enum_style": generator.config.enum_style,
            "namespace_count": len(table),
            "type_count": sum(len(ns.types) for ns in table.values()),
            "function_count": sum(len(ns.functions) for ns in table.values()),
            "event_count": sum(len(ns.events) for ns in table.values()),
            "unresolved_references": list(generator.unresolved_references),
        }

        return GenerationResult(code, list(generator.warnings), metadata)

    except Exception as e:
        return GenerationResult.error(f"Declaration generation failed: {str(e)}", exception=e)
