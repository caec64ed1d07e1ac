"""
Naming utilities for the declaration output.

Handles reserved keywords of the declaration language and the names
synthesized for hoisted helper types.
"""

import re
from typing import Dict, Optional, Set, Tuple

# Reserved keywords that cannot name a declared function
TS_RESERVED_WORDS = {
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "new",
    "null",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
}

HOISTED_PREFIX = "_"
RESERVED_PREFIX = "_"


def convert_name(name: str) -> str:
    """
    Convert snake_case segments to PascalCase.

    Only the first letter of every segment changes, the rest of the
    segment keeps its casing (``onMessage_Event`` -> ``OnMessageEvent``).
    """
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def hoisted_name(identifier: str) -> str:
    """Name of the helper declaration hoisted for ``identifier``."""
    return HOISTED_PREFIX + convert_name(identifier)


def listener_name(namespace: str, event: str) -> str:
    """Name of the dedicated listener interface of an event."""
    return HOISTED_PREFIX + convert_name(f"{namespace.replace('.', '_')}_{event}_Event")


def enum_member_name(value: str) -> str:
    """Identifier used for a value in the legacy enum-keyword style."""
    cleaned = re.sub(r"[^a-zA-Z0-9_$]", "_", value)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


class NameSanitizer:
    """Renames declared names that collide with reserved keywords."""

    def __init__(self, reserved_words: Optional[Set[str]] = None):
        self.reserved_words = reserved_words if reserved_words is not None else TS_RESERVED_WORDS
        self._renamed: Dict[str, str] = {}

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words

    def sanitize_function_name(self, name: str) -> Tuple[str, Optional[str]]:
        """
        Return the internal name and, if renamed, the re-export statement.

        Args:
            name: External name of the function

        Returns:
            (internal name, ``export {_x as x};`` or None)
        """
        if not self.is_reserved(name):
            return name, None
        internal = self._renamed.setdefault(name, RESERVED_PREFIX + name)
        return internal, f"export {{{internal} as {name}}};"


def create_ts_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for TypeScript declarations."""
    return NameSanitizer(TS_RESERVED_WORDS)
