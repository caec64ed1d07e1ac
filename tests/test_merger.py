import copy

from conftest import namespace_record

from webext_typegen.codegen import Namespace, SchemaMerger
from webext_typegen.codegen.config import DEFAULT_NAMESPACE_ALIASES


def _merger() -> SchemaMerger:
    return SchemaMerger(DEFAULT_NAMESPACE_ALIASES)


def test_build_merges_fragments() -> None:
    fragments = [
        (
            "a.json",
            [
                namespace_record(
                    "tabs",
                    description="First.",
                    types=[{"id": "Tab"}],
                    properties={"X": {"value": 1}},
                    permissions=["tabs"],
                )
            ],
        ),
        (
            "b.json",
            [
                namespace_record(
                    "tabs",
                    types=[{"id": "TabStatus"}],
                    properties={"X": {"value": 2}, "Y": {"value": 3}},
                    functions=[{"name": "get"}],
                    permissions=["activeTab"],
                )
            ],
        ),
    ]
    table = _merger().build(fragments)

    tabs = table["tabs"]
    assert list(table) == ["tabs"]
    assert tabs.description == "First."
    assert [t["id"] for t in tabs.types] == ["Tab", "TabStatus"]
    assert tabs.properties == {"X": {"value": 2}, "Y": {"value": 3}}
    assert tabs.functions == [{"name": "get"}]
    assert tabs.permissions == ["tabs", "activeTab"]


def test_build_last_description_and_import_win() -> None:
    fragments = [
        ("a.json", [namespace_record("x", description="One", **{"$import": "a"})]),
        ("b.json", [namespace_record("x", description="Two", **{"$import": "b"})]),
        ("c.json", [namespace_record("x")]),
    ]
    table = _merger().build(fragments)
    assert table["x"].description == "Two"
    assert table["x"].import_from == "b"


def test_build_applies_aliases() -> None:
    table = _merger().build([("manifest.json", [namespace_record("manifest")])])
    assert list(table) == ["_manifest"]
    assert table["_manifest"].namespace == "_manifest"


def test_collapse_extended_types() -> None:
    types = [
        {
            "id": "A",
            "type": "object",
            "description": "first",
            "properties": {"x": {"type": "string"}},
        },
        {"$extend": "A", "description": "second", "properties": {"y": {"type": "integer"}}},
        {"id": "B", "choices": [{"type": "string"}]},
        {"$extend": "B", "choices": [{"type": "integer"}]},
    ]
    before = copy.deepcopy(types)
    collapsed = SchemaMerger.collapse_extended_types(types)

    assert types == before
    assert [t["id"] for t in collapsed] == ["A", "B"]
    assert collapsed[0]["description"] == "first"
    assert list(collapsed[0]["properties"]) == ["x", "y"]
    assert collapsed[1]["choices"] == [{"type": "string"}, {"type": "integer"}]
    assert not any("$extend" in t for t in collapsed)


def test_extend_imported_types() -> None:
    types = [
        {
            "id": "Base",
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "functions": [{"name": "f"}, {"name": "g"}],
        },
        {
            "id": "Derived",
            "$import": "Base.extra",
            "properties": {"b": {"type": "string"}},
            "functions": [{"name": "f", "description": "own"}],
        },
    ]
    SchemaMerger.extend_imported_types(types)

    derived = types[1]
    assert derived["id"] == "Derived"
    assert derived["type"] == "object"
    assert list(derived["properties"]) == ["b", "a"]
    assert derived["functions"] == [{"name": "f", "description": "own"}, {"name": "g"}]


def _import_table() -> dict:
    merger = _merger()
    return merger.build(
        [
            (
                "base.json",
                [
                    namespace_record(
                        "base",
                        types=[{"id": "T1", "type": "string"}],
                        functions=[{"name": "f"}, {"name": "g"}],
                        properties={"y": {"type": "string"}},
                        allowedContexts=["content"],
                    )
                ],
            ),
            (
                "derived.json",
                [
                    namespace_record(
                        "derived",
                        description="Derived",
                        permissions=["p"],
                        functions=[{"name": "f", "description": "own"}],
                        properties={"x": {"type": "string"}},
                        **{"$import": "base"},
                    )
                ],
            ),
        ]
    )


def test_namespace_import_is_a_superset() -> None:
    table = _import_table()
    derived = _merger().resolve_namespace(table, "derived")

    assert [f["name"] for f in derived.functions] == ["f", "g"]
    assert derived.functions[0]["description"] == "own"
    assert [t["id"] for t in derived.types] == ["T1"]
    assert list(derived.properties) == ["x", "y"]
    assert derived.description == "Derived"
    assert derived.permissions == ["p"]
    assert derived.allowed_contexts == ["content"]
    # The table itself is untouched
    assert len(table["derived"].functions) == 1
    assert table["derived"].types == []


def test_chained_namespace_imports() -> None:
    table = {
        "a": Namespace("a", import_from="b"),
        "b": Namespace("b", import_from="c", functions=[{"name": "fb"}]),
        "c": Namespace("c", functions=[{"name": "fc"}]),
    }
    a = _merger().resolve_namespace(table, "a")
    assert [f["name"] for f in a.functions] == ["fb", "fc"]


def test_namespace_import_cycle() -> None:
    table = {
        "a": Namespace("a", import_from="b", functions=[{"name": "fa"}]),
        "b": Namespace("b", import_from="a", functions=[{"name": "fb"}]),
    }
    a = _merger().resolve_namespace(table, "a")
    assert [f["name"] for f in a.functions] == ["fa", "fb"]


def test_resolve_namespace_collapses_extends() -> None:
    table = {
        "ns": Namespace(
            "ns",
            types=[
                {"id": "A", "type": "object", "properties": {"x": {"type": "string"}}},
                {"$extend": "A", "properties": {"y": {"type": "string"}}},
            ],
        )
    }
    ns = _merger().resolve_namespace(table, "ns")
    assert len(ns.types) == 1
    assert list(ns.types[0]["properties"]) == ["x", "y"]
    assert len(table["ns"].types) == 2


def test_mark_unsupported_optional() -> None:
    table = {
        "ns": Namespace(
            "ns",
            functions=[
                {
                    "name": "f",
                    "parameters": [{"name": "x", "type": "string", "unsupported": True}],
                }
            ],
            properties={"P": {"type": "string", "unsupported": True}},
        )
    }
    count = SchemaMerger.mark_unsupported_optional(table)

    assert count == 2
    assert table["ns"].functions[0]["parameters"][0]["optional"] is True
    assert table["ns"].properties["P"]["optional"] is True
    assert "optional" not in table["ns"].functions[0]
