"""Tool registry for the OpenAPI MCP Adapter."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Set

from .compiler import ToolCompiler
from .errors import DuplicateToolError
from .models import OperationDescriptor, ToolDescriptor


logger = logging.getLogger(__name__)


class ToolRegistry:
    def __init__(self, tools: Iterable[ToolDescriptor] = ()) -> None:
        self._tools: List[ToolDescriptor] = []
        self.extend(tools)

    def add(self, tool: ToolDescriptor) -> None:
        if tool.name in self:
            raise DuplicateToolError(f"Duplicate tool name: {tool.name}")
        self._tools.append(tool)

    def extend(self, tools: Iterable[ToolDescriptor]) -> None:
        for tool in tools:
            self.add(tool)

    def get(self, name: str) -> Optional[ToolDescriptor]:
        for tool in self._tools:
            if tool.name == name:
                return tool
        return None

    def names(self) -> List[str]:
        return [tool.name for tool in self._tools]

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(list(self._tools))

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return any(tool.name == name for tool in self._tools)


def build_registry(
    operations: Iterable[OperationDescriptor],
    compiler: ToolCompiler,
    allowlist: Optional[Set[str]] = None,
) -> ToolRegistry:
    registry = ToolRegistry()
    for operation in operations:
        if allowlist and operation.operation_id not in allowlist:
            logger.debug("Skipping operation outside allowlist: %s", operation.operation_id)
            continue
        registry.add(compiler.compile(operation))
    logger.info("Compiled %s tools", len(registry))
    return registry
