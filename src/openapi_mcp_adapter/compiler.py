"""Compile operation descriptors into callable MCP tools."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from .binder import ParameterBinder
from .dispatcher import RequestDispatcher
from .errors import AdapterError, ValidationError
from .formatting import describe_error, format_outcome
from .logging import redact_payload
from .models import Envelope, Failure, OperationDescriptor, Outcome, Success, ToolDescriptor

logger = logging.getLogger(__name__)


class ToolCompiler:
    """Turns one :class:`OperationDescriptor` into a :class:`ToolDescriptor`.

    The compiled handler never raises: every failure inside binding,
    token resolution, dispatch or parsing comes back as an error envelope.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        binder: Optional[ParameterBinder] = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.binder = binder or ParameterBinder()

    def compile(self, operation: OperationDescriptor) -> ToolDescriptor:
        async def handler(args: Any = None) -> Envelope:
            outcome = await self.invoke(operation, args)
            return format_outcome(outcome)

        handler.__name__ = operation.operation_id

        return ToolDescriptor(
            name=operation.operation_id,
            description=self._describe(operation),
            schema=self.build_schema(operation),
            handler=handler,
        )

    async def invoke(self, operation: OperationDescriptor, args: Any) -> Outcome:
        label = operation.summary or operation.operation_id
        try:
            if args is None:
                args = {}
            if not isinstance(args, Mapping):
                raise ValidationError(
                    f"Arguments must be an object, got {type(args).__name__}"
                )
            logger.info("Executing tool=%s args=%s", operation.operation_id, redact_payload(args))
            plan = self.binder.plan(operation, args)
            data = await self.dispatcher.dispatch(plan)
        except AdapterError as exc:
            logger.error("Error in %s: %s", operation.operation_id, exc)
            return Failure(f"{label} failed: {describe_error(exc)}")
        except Exception as exc:
            logger.exception("Unexpected error in %s", operation.operation_id)
            return Failure(f"{label} failed: {describe_error(exc)}")

        return Success(message=f"{label} completed successfully", data=data)

    def build_schema(self, operation: OperationDescriptor) -> Dict[str, Any]:
        properties: Dict[str, Dict[str, Any]] = {}
        required = []
        for parameter in operation.parameters:
            prop: Dict[str, Any] = {
                "type": parameter.data_type.value,
                "description": parameter.description,
            }
            if parameter.required:
                prop["required"] = True
                required.append(parameter.name)
            properties[parameter.name] = prop

        return {
            "type": "object",
            "title": operation.summary or operation.operation_id,
            "description": self._describe(operation),
            "properties": properties,
            "required": required,
        }

    def _describe(self, operation: OperationDescriptor) -> str:
        summary = operation.summary.strip()
        notes = operation.description.strip()
        if summary and notes and notes != summary:
            return f"{summary} - {notes}"
        return summary or notes or f"{operation.method.upper()} {operation.path}"

