import logging

from webext_typegen.codegen import AdditionalTypeSink, ReferenceResolver


def test_same_namespace_reference(make_env) -> None:
    env = make_env(namespaces=("foo",), current="foo")
    assert env.resolver.resolve("foo.Bar", env.ctx) == "Bar"
    assert env.sink == []
    assert env.warnings == []


def test_reference_into_known_namespace(make_env) -> None:
    env = make_env(namespaces=("foo", "other"), current="other")
    assert env.resolver.resolve("foo.Bar", env.ctx) == "foo.Bar"
    assert env.sink == []


def test_reference_into_unknown_namespace(make_env, caplog) -> None:
    env = make_env(namespaces=("other",), current="other")
    with caplog.at_level(logging.WARNING, logger="webext_typegen"):
        assert env.resolver.resolve("foo.Bar", env.ctx) == "Bar"

    assert env.sink == ["type Bar = any;"]
    assert env.warnings == ['Cannot find reference "foo.Bar", assuming the browser knows better.']
    assert "foo.Bar" in caplog.text
    assert env.resolver.unresolved == {"foo.Bar"}


def test_unknown_namespace_with_local_type(make_env) -> None:
    env = make_env(namespaces=("other",), current="other", types=[{"id": "Bar"}])
    assert env.resolver.resolve("foo.Bar", env.ctx) == "Bar"
    assert env.sink == []
    assert env.resolver.unresolved == set()


def test_bare_reference_to_missing_type(env) -> None:
    assert env.resolver.resolve("Missing", env.ctx) == "Missing"
    assert env.sink == ["type Missing = any;"]


def test_aliased_namespace(make_env) -> None:
    env = make_env(namespaces=("_manifest",), current="_manifest")
    assert env.resolver.resolve("manifest.WebExtensionManifest", env.ctx) == "WebExtensionManifest"

    env = make_env(namespaces=("_manifest", "runtime"), current="runtime")
    assert env.resolver.resolve("manifest.WebExtensionManifest", env.ctx) == (
        "_manifest.WebExtensionManifest"
    )


def test_split_keeps_dotted_namespace() -> None:
    resolver = ReferenceResolver({}, {"manifest": "_manifest"})
    assert resolver.split("devtools.panels.ElementsPanel") == ("devtools.panels", "ElementsPanel")
    assert resolver.split("manifest.Permission") == ("_manifest", "Permission")
    assert resolver.split("Tab") == (None, "Tab")


def test_sink_deduplicates_in_order() -> None:
    sink = AdditionalTypeSink()
    sink.push("type A = any;")
    sink.push("type B = any;")
    sink.push("type A = any;")

    assert sink.declarations() == ["type A = any;", "type B = any;"]
    assert len(sink) == 2
    assert "type B = any;" in sink

    sink.clear()
    assert sink.declarations() == []
