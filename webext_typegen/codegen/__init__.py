"""
WebExtension declaration generation.

Compiles browser extension API schemas into TypeScript declarations.
"""

from .compiler import TypeCompiler
from .config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .customize import CustomizationLog, EditMember, RemoveMember, RemoveNamespace, find_index
from .docs import DocBuilder, format_contexts
from .errors import CustomizationError, GeneratorError, SchemaCompileError
from .functions import EventCompiler, FunctionCompiler, split_leading_optionals
from .generator import DeclarationGenerator, GenerationResult, generate_code
from .merger import SchemaMerger
from .naming import NameSanitizer, convert_name, create_ts_sanitizer
from .resolver import AdditionalTypeSink, ReferenceResolver
from .schema import CompileContext, Namespace, NamespaceScope
from .templates import TemplateEngine, TemplateError, create_template_engine

# Version info
__version__ = "0.1.0"

__all__ = [
    # Generator
    "DeclarationGenerator",
    "GeneratorError",
    "SchemaCompileError",
    "CustomizationError",
    "GenerationResult",
    "generate_code",
    # Compilers
    "TypeCompiler",
    "FunctionCompiler",
    "EventCompiler",
    "split_leading_optionals",
    "ReferenceResolver",
    "AdditionalTypeSink",
    # Schema model
    "Namespace",
    "NamespaceScope",
    "CompileContext",
    "SchemaMerger",
    # Customizations
    "CustomizationLog",
    "RemoveNamespace",
    "RemoveMember",
    "EditMember",
    "find_index",
    # Docs and naming
    "DocBuilder",
    "format_contexts",
    "NameSanitizer",
    "convert_name",
    "create_ts_sanitizer",
    # Configuration
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Templates
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
