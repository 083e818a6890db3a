"""Route invocation arguments into path, query and body parameters."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping
from urllib.parse import quote

from .errors import ValidationError
from .models import (
    BoundParameters,
    OperationDescriptor,
    ParameterDescriptor,
    ParameterLocation,
    RequestPlan,
)

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

# Characters encodeURIComponent leaves alone on top of quote()'s defaults.
_PATH_SAFE = "!~*'()"


class ParameterBinder:
    def plan(self, operation: OperationDescriptor, args: Mapping[str, Any]) -> RequestPlan:
        self.check_required(args, operation.parameters)
        bound = self.bind(args, operation.parameters)
        endpoint = self.resolve_endpoint(operation.path, bound.path_params)
        logger.debug("Bound %s to %s %s", operation.operation_id, operation.method, endpoint)
        return RequestPlan(
            method=operation.method.upper(),
            endpoint=endpoint,
            query_params=bound.query_params,
            body_params=bound.body_params,
        )

    def bind(
        self, args: Mapping[str, Any], parameters: Iterable[ParameterDescriptor]
    ) -> BoundParameters:
        bound = BoundParameters()
        targets: Dict[ParameterLocation, Dict[str, Any]] = {
            ParameterLocation.PATH: bound.path_params,
            ParameterLocation.QUERY: bound.query_params,
            ParameterLocation.BODY: bound.body_params,
        }
        for parameter in parameters:
            if not _is_present(args, parameter.name):
                continue
            targets[parameter.location][parameter.name] = args[parameter.name]
        return bound

    def check_required(
        self, args: Mapping[str, Any], parameters: Iterable[ParameterDescriptor]
    ) -> None:
        missing = [
            parameter.name
            for parameter in parameters
            if parameter.required and not _is_present(args, parameter.name)
        ]
        if missing:
            raise ValidationError(f"Missing required parameter(s): {', '.join(missing)}")

    def resolve_endpoint(self, path_template: str, path_params: Mapping[str, Any]) -> str:
        unresolved: List[str] = []

        def substitute(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name not in path_params:
                unresolved.append(name)
                return match.group(0)
            return quote(_path_value(path_params[name]), safe=_PATH_SAFE)

        endpoint = _PLACEHOLDER.sub(substitute, path_template)
        if unresolved:
            raise ValidationError(
                f"No value for path parameter(s) {', '.join(unresolved)} in {path_template}"
            )
        return endpoint


def _is_present(args: Mapping[str, Any], name: str) -> bool:
    return name in args and args[name] is not None


def _path_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)
