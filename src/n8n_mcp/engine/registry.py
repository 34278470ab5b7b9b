"""
Tool registry mapping tool names to descriptors.

The registry is populated once during server startup and then frozen.
After freezing it is read-only, so concurrent dispatches read it without
any synchronization.

Features:
- Register descriptors with duplicate detection
- Look up descriptors by name
- List names and descriptors in registration order
- Freeze to reject any further registration
"""

import logging
from collections.abc import Iterable, Iterator

from .exceptions import DuplicateToolError, RegistryFrozenError, UnknownToolError
from .schema import ToolDescriptor

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Central registry of tool descriptors.

    Example:
        registry = ToolRegistry()
        registry.register(descriptor)
        registry.freeze()

        descriptor = registry.lookup("get_workflow")
    """

    def __init__(self, descriptors: Iterable[ToolDescriptor] = ()) -> None:
        """Initialize registry, optionally pre-populated."""
        self._tools: dict[str, ToolDescriptor] = {}
        self._frozen = False
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ToolDescriptor) -> None:
        """
        Register a tool descriptor.

        Args:
            descriptor: ToolDescriptor to register

        Raises:
            RegistryFrozenError: If the registry has been frozen
            DuplicateToolError: If a tool with the same name already exists
        """
        if self._frozen:
            raise RegistryFrozenError(descriptor.name)
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)

        self._tools[descriptor.name] = descriptor
        logger.debug(f"Registered tool: {descriptor.name}")

    def lookup(self, name: str) -> ToolDescriptor:
        """
        Get a descriptor by tool name.

        Raises:
            UnknownToolError: If no tool is registered under ``name``
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name, self.names()) from None

    def freeze(self) -> None:
        """Reject further registration. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.info(f"Tool registry frozen with {len(self._tools)} tools")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        """Registered tool names in registration order."""
        return list(self._tools)

    def descriptors(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self.descriptors())

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"ToolRegistry(tools={len(self._tools)}, {state})"


__all__ = ["ToolRegistry"]
