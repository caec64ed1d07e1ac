"""
Documentation comments for declarations.

Text conversion is delegated to a renderer exposing
``render_description(text)`` and ``wrap_as_comment(text)``; the default
one lives in ``webext_typegen.desc_to_doc``.
"""

import re
from typing import Any, Dict, List, Optional, Protocol

from .schema import Namespace

# Readable names for "allowedContexts" values
CONTEXT_NAMES = {
    "addon_parent": "Add-on parent",
    "content": "Content scripts",
    "devtools": "Devtools pages",
    "proxy": "Proxy scripts",
}

# "X only" is noted for these contexts
CTX_CMT_ONLY_ALLOWED_IN = ["content", "devtools", "proxy"]

# Noted as "Not allowed in" when missing
CTX_CMT_NOT_ALLOWED_IN = ["content", "devtools"]

# Noted as "Allowed in" when present
CTX_CMT_ALLOWED_IN = ["proxy"]

_ONLY_RE = re.compile(r"^(.*)_only$")
_MANIFEST_KEY_RE = re.compile(r"^manifest:(.*)")


class DocRenderer(Protocol):
    def render_description(self, text: str) -> str: ...

    def wrap_as_comment(self, text: str) -> str: ...


def format_contexts(contexts: Optional[List[str]], output_always: bool = False) -> str:
    """Format an allowedContexts list as readable text."""
    if not contexts:
        if not output_always:
            return ""
        contexts = []

    for context in contexts:
        match = _ONLY_RE.match(context)
        if match and match.group(1) in CTX_CMT_ONLY_ALLOWED_IN:
            return f"Allowed in: {CONTEXT_NAMES[match.group(1)]} only"

    lines = []
    not_allowed_in = [ctx for ctx in CTX_CMT_NOT_ALLOWED_IN if ctx not in contexts]
    if not_allowed_in:
        lines.append(
            "Not allowed in: " + ", ".join(CONTEXT_NAMES[ctx] for ctx in not_allowed_in)
        )
    allowed_in = [ctx for ctx in CTX_CMT_ALLOWED_IN if ctx in contexts]
    if allowed_in:
        lines.append("Allowed in: " + ", ".join(CONTEXT_NAMES[ctx] for ctx in allowed_in))
    return "\n\n".join(lines)


class DocBuilder:
    """Builds doc comments for schema nodes and namespace headers."""

    def __init__(self, renderer: DocRenderer):
        self.renderer = renderer

    def comment_from_schema(self, node: Dict[str, Any]) -> str:
        """
        Create a doc comment for a type, function, event or enum value.

        Returns an empty string when there is nothing to document, else
        the comment followed by a newline.
        """
        render = self.renderer.render_description
        doclines = []
        if node.get("description"):
            doclines.append(render(node["description"]))

        contexts = format_contexts(node.get("allowedContexts"))
        if contexts:
            if doclines:
                doclines.append("")
            doclines.append(contexts)

        for param in node.get("parameters") or []:
            # @param is redundant without a description
            if not isinstance(param, dict) or not param.get("description"):
                continue
            name = f"[{param.get('name')}]" if param.get("optional") else param.get("name")
            doclines.append(f"@param {name} {render(param['description'])}")

        deprecated = node.get("deprecated")
        if deprecated:
            if not isinstance(deprecated, str):
                deprecated = node.get("description") or ""
            doclines.append(f"@deprecated {render(deprecated)}")
        elif node.get("unsupported"):
            doclines.append("@deprecated Unsupported on Firefox at this time.")

        returns = node.get("returns")
        if isinstance(returns, dict) and returns.get("description"):
            doclines.append(f"@returns {render(returns['description'])}")

        if not doclines:
            return ""
        return self.renderer.wrap_as_comment("\n".join(doclines)) + "\n"

    def namespace_comment(self, namespace: Namespace) -> str:
        """Doc comment for a namespace block (without trailing newline)."""
        doclines = []
        if namespace.description:
            doclines.append(self.renderer.render_description(namespace.description))

        permissions = []
        manifest_keys = []
        for perm in namespace.permissions:
            match = _MANIFEST_KEY_RE.match(perm)
            if match:
                manifest_keys.append(match.group(1))
            else:
                permissions.append(perm)
        if permissions:
            doclines.append("Permissions: " + ", ".join(f"`{p}`" for p in permissions))
        if manifest_keys:
            doclines.append("Manifest keys: " + ", ".join(f"`{k}`" for k in manifest_keys))

        contexts = format_contexts(namespace.allowed_contexts, output_always=True)
        if contexts:
            doclines.append(contexts)

        if not doclines:
            return ""
        return self.renderer.wrap_as_comment("\n\n".join(doclines))
