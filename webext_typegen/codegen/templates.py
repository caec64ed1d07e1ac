"""
Template engine wrapper for declaration output.

Provides Jinja2 rendering of the file header and of the namespace
blocks. Built-in templates live in memory; a template directory can
override them by file name.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, select_autoescape


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


HEADER_TEMPLATE = """\
// Type definitions for WebExtension Development in FireFox {{ firefox_version }}
// Project: https://developer.mozilla.org/en-US/Add-ons/WebExtensions
// Definitions by: Jasmin Bom <https://github.com/jsmnbom>
// Definitions: https://github.com/DefinitelyTyped/DefinitelyTyped
// TypeScript Version: 2.9
// Generated using script at github.com/jsmnbom/definitelytyped-firefox-webext-browser

interface WebExtEventBase<TAddListener extends (...args: any[]) => any, TCallback> {
    addListener: TAddListener;
    removeListener(cb: TCallback): void;
    hasListener(cb: TCallback): boolean;
}

type WebExtEvent<TCallback extends (...args: any[]) => any> = WebExtEventBase<(callback: TCallback) => void, TCallback>;

interface Window {
    {{ root }}: typeof {{ root }};
}

"""

# An empty namespace renders as "{}"
NAMESPACE_TEMPLATE = (
    "{% if doc %}{{ doc }}\n{% endif %}"
    "declare namespace {{ root }}.{{ name }} {{ '{' }}"
    "{% if body %}\n{{ body }}\n{% endif %}"
    "}\n\n"
)

BUILTIN_TEMPLATES = {
    "header.d.ts.j2": HEADER_TEMPLATE,
    "namespace.d.ts.j2": NAMESPACE_TEMPLATE,
}


class TemplateEngine:
    """Wrapper for Jinja2 template engine with declaration utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory whose files take precedence over the built-ins
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._builtins = DictLoader(dict(BUILTIN_TEMPLATES))
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        if self.template_dir and self.template_dir.exists():
            loader = ChoiceLoader([FileSystemLoader(str(self.template_dir)), self._builtins])
        else:
            loader = self._builtins

        self._env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            keep_trailing_newline=True,
        )

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

    def template_exists(self, template_name: str) -> bool:
        return template_name in self._env.list_templates()

    def add_template(self, name: str, content: str):
        """Add or replace an in-memory template."""
        self._builtins.mapping[name] = content


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, optionally overriding templates from a folder."""
    return TemplateEngine(template_dir)
