"""
Customization commands applied to the merged namespace table.

Patches for known schema defects are recorded as a list of commands and
applied in order after merging and before compilation.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..logging_config import get_logger
from .errors import CustomizationError
from .schema import Namespace

logger = get_logger(__name__)

Edit = Callable[[Any], Any]


def find_index(namespace: Namespace, section: str, key: str) -> Optional[Union[int, str]]:
    """
    Locate a member of a namespace section.

    List sections match on ``id``, ``name``, ``$extend`` or ``$import``;
    the properties mapping matches on its key.

    Returns:
        List index or property name, None when not found
    """
    members = namespace.section(section)
    if isinstance(members, dict):
        return key if key in members else None
    for i, member in enumerate(members):
        if not isinstance(member, dict):
            continue
        if key in (member.get("id"), member.get("name"), member.get("$extend"), member.get("$import")):
            return i
    return None


@dataclass(frozen=True)
class RemoveNamespace:
    namespace: str

    def describe(self) -> str:
        return self.namespace


@dataclass(frozen=True)
class RemoveMember:
    namespace: str
    section: str
    key: str

    def describe(self) -> str:
        return f"{self.namespace}.{self.section}.{self.key}"


@dataclass(frozen=True)
class EditMember:
    namespace: str
    section: str
    key: str
    edit: Edit = field(compare=False)

    def describe(self) -> str:
        return f"{self.namespace}.{self.section}.{self.key}"


Command = Union[RemoveNamespace, RemoveMember, EditMember]


class CustomizationLog:
    """Ordered, replayable list of customization commands."""

    def __init__(self):
        self.commands: List[Command] = []

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self):
        return iter(self.commands)

    def remove_namespace(self, namespace: str) -> "CustomizationLog":
        self.commands.append(RemoveNamespace(namespace))
        return self

    def remove(self, namespace: str, section: str, key: str) -> "CustomizationLog":
        self.commands.append(RemoveMember(namespace, section, key))
        return self

    def edit(self, namespace: str, section: str, key: str, edit: Edit) -> "CustomizationLog":
        self.commands.append(EditMember(namespace, section, key, edit))
        return self

    def edit_path(self, path: Sequence[str], edit: Edit) -> "CustomizationLog":
        """Same as ``edit`` with ``(namespace, section, key)`` as one sequence."""
        namespace, section, key = path
        return self.edit(namespace, section, key, edit)

    def apply(self, table: Dict[str, Namespace], strict: bool = False) -> List[str]:
        """
        Apply every command to the table, in order.

        Args:
            table: Merged namespace table, modified in place
            strict: Raise instead of skipping commands whose target is missing

        Returns:
            Warning messages for skipped commands

        Raises:
            CustomizationError: In strict mode, for a missing target
        """
        warnings = []
        for command in self.commands:
            message = self._apply_one(table, command)
            if message is None:
                continue
            if strict:
                raise CustomizationError(message)
            logger.warning(message)
            warnings.append(message)
        return warnings

    def _apply_one(self, table: Dict[str, Namespace], command: Command) -> Optional[str]:
        if isinstance(command, RemoveNamespace):
            if table.pop(command.namespace, None) is None:
                return f"Cannot remove namespace {command.describe()}: not found"
            return None

        namespace = table.get(command.namespace)
        if namespace is None:
            return f"Cannot customize {command.describe()}: namespace not found"

        if isinstance(command, EditMember):
            logger.info("Editing %s", command.describe())

        index = find_index(namespace, command.section, command.key)
        if index is None:
            return f"Cannot customize {command.describe()}: member not found"

        members = namespace.section(command.section)
        if isinstance(command, RemoveMember):
            del members[index]
        else:
            members[index] = command.edit(members[index])
        return None
