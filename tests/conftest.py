import copy
from typing import Any

import pytest

from webext_typegen.codegen import (
    AdditionalTypeSink,
    CompileContext,
    CustomizationLog,
    DeclarationGenerator,
    DocBuilder,
    GeneratorConfig,
    Namespace,
    NamespaceScope,
    ReferenceResolver,
    TypeCompiler,
)
from webext_typegen.codegen.config import DEFAULT_NAMESPACE_ALIASES
from webext_typegen.desc_to_doc import DescriptionRenderer


class CompileEnv:
    """A namespace table plus a compiler scoped to one of its namespaces."""

    def __init__(self, namespaces=("ns",), current="ns", enum_style="union", types=None):
        self.table = {name: Namespace(namespace=name) for name in namespaces}
        self.table.setdefault(current, Namespace(namespace=current))
        self.table[current].types.extend(types or [])
        self.resolver = ReferenceResolver(self.table, DEFAULT_NAMESPACE_ALIASES)
        self.compiler = TypeCompiler(self.resolver, DocBuilder(DescriptionRenderer()), enum_style)
        self.scope = NamespaceScope(self.table[current], AdditionalTypeSink())
        self.ctx = CompileContext(self.scope)

    def compile(self, node: dict[str, Any], root: bool = False, node_id: str | None = None) -> str:
        ctx = self.ctx.as_root(node_id) if root else self.ctx.child(node_id)
        return self.compiler.compile(node, ctx)

    @property
    def sink(self) -> list[str]:
        return self.scope.sink.declarations()

    @property
    def warnings(self) -> list[str]:
        return self.scope.warnings


def namespace_record(name: str, **sections: Any) -> dict[str, Any]:
    """Build one namespace record as found in a schema file."""
    return {"namespace": name, **sections}


@pytest.fixture
def env() -> CompileEnv:
    return CompileEnv()


@pytest.fixture
def make_env():
    return CompileEnv


@pytest.fixture
def config() -> GeneratorConfig:
    return GeneratorConfig(firefox_version="63.0", apply_customizations=False)


@pytest.fixture
def generator(config) -> DeclarationGenerator:
    return DeclarationGenerator(config)


@pytest.fixture
def alarms_fragments() -> list:
    alarms = namespace_record(
        "alarms",
        description="Alarms API.",
        permissions=["alarms"],
        types=[
            {
                "id": "Alarm",
                "type": "object",
                "properties": {"name": {"type": "string"}},
            }
        ],
        functions=[
            {
                "name": "clear",
                "type": "function",
                "async": "callback",
                "parameters": [
                    {"name": "name", "type": "string", "optional": True},
                    {
                        "name": "callback",
                        "type": "function",
                        "parameters": [{"name": "wasCleared", "type": "boolean"}],
                    },
                ],
            }
        ],
        events=[
            {
                "name": "onAlarm",
                "type": "function",
                "parameters": [{"name": "alarm", "$ref": "Alarm"}],
            }
        ],
    )
    return [("alarms.json", [alarms])]


@pytest.fixture
def fresh(alarms_fragments):
    """Deep copies of fixture fragments, for repeated runs."""

    def _fresh(fragments=None):
        return copy.deepcopy(fragments if fragments is not None else alarms_fragments)

    return _fresh


@pytest.fixture
def empty_customizations() -> CustomizationLog:
    return CustomizationLog()
