import pytest

from webext_typegen.codegen import DocBuilder, Namespace, format_contexts
from webext_typegen.desc_to_doc import DescriptionRenderer, desc_to_markdown, is_web_uri, to_doc_comment


@pytest.fixture
def docs() -> DocBuilder:
    return DocBuilder(DescriptionRenderer())


@pytest.mark.parametrize(
    ("contexts", "output_always", "expected"),
    [
        (None, False, ""),
        (None, True, "Not allowed in: Content scripts, Devtools pages"),
        (["content_only"], False, "Allowed in: Content scripts only"),
        (["content", "devtools"], False, ""),
        (["devtools"], False, "Not allowed in: Content scripts"),
        (
            ["proxy"],
            False,
            "Not allowed in: Content scripts, Devtools pages\n\nAllowed in: Proxy scripts",
        ),
    ],
)
def test_format_contexts(contexts, output_always, expected) -> None:
    assert format_contexts(contexts, output_always) == expected


def test_empty_comment(docs) -> None:
    assert docs.comment_from_schema({"type": "string"}) == ""


def test_deprecated_repeats_description(docs) -> None:
    assert docs.comment_from_schema({"description": "Old.", "deprecated": True}) == (
        "/**\n * Old.\n * @deprecated Old.\n */\n"
    )


def test_deprecated_message(docs) -> None:
    node = {"deprecated": "Use <code>other</code> instead."}
    assert docs.comment_from_schema(node) == "/** @deprecated Use `other` instead. */\n"


def test_unsupported(docs) -> None:
    assert docs.comment_from_schema({"unsupported": True}) == (
        "/** @deprecated Unsupported on Firefox at this time. */\n"
    )


def test_optional_param_in_brackets(docs) -> None:
    node = {"parameters": [{"name": "x", "optional": True, "description": "An x."}]}
    assert docs.comment_from_schema(node) == "/** @param [x] An x. */\n"


def test_returns_and_contexts(docs) -> None:
    node = {
        "description": "Gets it.",
        "allowedContexts": ["content"],
        "returns": {"type": "string", "description": "The value."},
    }
    assert docs.comment_from_schema(node) == (
        "/**\n"
        " * Gets it.\n"
        " * \n"
        " * Not allowed in: Devtools pages\n"
        " * @returns The value.\n"
        " */\n"
    )


def test_namespace_comment(docs) -> None:
    namespace = Namespace(
        "tabs",
        description="Use tabs.",
        permissions=["tabs", "manifest:browser_action"],
        allowed_contexts=["content", "devtools"],
    )
    assert docs.namespace_comment(namespace) == (
        "/**\n"
        " * Use tabs.\n"
        " * \n"
        " * Permissions: `tabs`\n"
        " * \n"
        " * Manifest keys: `browser_action`\n"
        " */"
    )


def test_namespace_comment_always_has_contexts(docs) -> None:
    assert docs.namespace_comment(Namespace("x")) == (
        "/** Not allowed in: Content scripts, Devtools pages */"
    )


def test_to_doc_comment() -> None:
    assert to_doc_comment("Short.") == "/** Short. */"
    assert to_doc_comment("a\nb") == "/**\n * a\n * b\n */"
    long_text = "x" * 101
    assert to_doc_comment(long_text) == f"/**\n * {long_text}\n */"


@pytest.mark.parametrize(
    ("href", "expected"),
    [
        ("https://developer.mozilla.org", True),
        ("http://example.com/a", True),
        ("#type-Tab", False),
        ("tabs#method-get", False),
        (None, False),
    ],
)
def test_is_web_uri(href, expected) -> None:
    assert is_web_uri(href) is expected


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Plain text.", "Plain text."),
        ("Use <var>tabId</var> here", "Use `tabId` here"),
        ("See $(ref:tabs.Tab).", "See `tabs.Tab`."),
        ("Read $(topic:messaging)[Content Script Messaging].", "Read Content Script Messaging."),
        ("Use chrome.tabs and chrome.windows", "Use browser.tabs and chrome.windows"),
        ("<b>Bold</b> and <em>it</em>", "**Bold** and _it_"),
        ('<a href="https://example.com">link</a>', "[link](https://example.com)"),
        ('<a href="#type-Tab">Tab</a>', "Tab"),
        ("<p>One</p><p>Two</p>", "One\n\nTwo"),
        ("<ul><li>a</li><li>b</li></ul>", "*   a\n*   b"),
        ("The <webview> tag</webview>", "The <webview> tag"),
        ("a<br>b", "a  \nb"),
    ],
)
def test_desc_to_markdown(description, expected) -> None:
    assert desc_to_markdown(description) == expected
