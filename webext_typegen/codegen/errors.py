"""
Exceptions raised while building declarations.
"""

import json
from typing import Any, Dict


class GeneratorError(Exception):
    """Base exception for declaration generation errors."""

    pass


class SchemaCompileError(GeneratorError):
    """A type node matches none of the compilation rules."""

    def __init__(self, node: Dict[str, Any]):
        self.node = node
        super().__init__(f"Cannot handle type {json.dumps(node, sort_keys=True)}")


class CustomizationError(GeneratorError):
    """A customization command could not find its target."""

    pass
