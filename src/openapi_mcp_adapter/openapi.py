"""OpenAPI document loader and operation parser."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
import yaml

from .errors import CatalogError
from .models import DataType, OperationDescriptor, ParameterDescriptor, ParameterLocation


logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete")


class OpenAPILoader:
    async def load_spec(self, source: str) -> Dict[str, Any]:
        if source.startswith(("http://", "https://")):
            async with httpx.AsyncClient(timeout=30) as client:
                try:
                    response = await client.get(source)
                except httpx.HTTPError as exc:
                    raise CatalogError(f"Failed to fetch OpenAPI spec {source}: {exc}") from exc
            if response.status_code != 200:
                raise CatalogError(
                    f"Failed to fetch OpenAPI spec: {source} ({response.status_code})"
                )
            return self.parse_document(response.text, source)

        path = Path(source)
        if not path.exists():
            raise CatalogError(f"OpenAPI spec file not found: {source}")
        return self.parse_document(path.read_text(encoding="utf-8"), source)

    def parse_document(self, text: str, source: str = "<string>") -> Dict[str, Any]:
        try:
            if source.lower().endswith(".json"):
                document = json.loads(text)
            else:
                # YAML is a superset of JSON
                document = yaml.safe_load(text)
        except (ValueError, yaml.YAMLError) as exc:
            raise CatalogError(f"Invalid OpenAPI document {source}: {exc}") from exc

        if not isinstance(document, dict) or "paths" not in document:
            raise CatalogError(f"OpenAPI document {source} has no paths")
        return document

    def extract_operations(self, spec: Dict[str, Any]) -> List[OperationDescriptor]:
        operations: List[OperationDescriptor] = []
        paths = spec.get("paths") or {}

        for path, methods in paths.items():
            methods = self._resolve(spec, methods or {})
            shared_parameters = methods.get("parameters") or []
            for method, operation in methods.items():
                if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue
                operation_id = operation.get("operationId") or self._fallback_operation_id(
                    method, path
                )
                parameters = self._build_parameters(spec, operation, shared_parameters)
                operations.append(
                    OperationDescriptor(
                        operation_id=operation_id,
                        method=method.upper(),
                        path=path,
                        summary=(operation.get("summary") or "").strip(),
                        description=(operation.get("description") or "").strip(),
                        parameters=tuple(parameters),
                    )
                )

        return operations

    def extract_server_url(self, spec: Dict[str, Any]) -> Optional[str]:
        servers = spec.get("servers") or []
        if servers and isinstance(servers[0], dict) and servers[0].get("url"):
            server = servers[0]
            url = server["url"]
            for name, variable in (server.get("variables") or {}).items():
                url = url.replace(f"{{{name}}}", str(variable.get("default", "")))
            return url

        host = spec.get("host")
        if host:
            scheme = (spec.get("schemes") or ["https"])[0]
            return f"{scheme}://{host}{spec.get('basePath', '')}"
        return None

    def _build_parameters(
        self,
        spec: Dict[str, Any],
        operation: Dict[str, Any],
        shared_parameters: Iterable[Dict[str, Any]],
    ) -> List[ParameterDescriptor]:
        merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for raw in [*shared_parameters, *(operation.get("parameters") or [])]:
            parameter = self._resolve(spec, raw)
            if not parameter.get("name"):
                continue
            merged[(parameter["name"], parameter.get("in", ""))] = parameter

        parameters: List[ParameterDescriptor] = []
        for parameter in merged.values():
            location = parameter.get("in")
            if location in ("path", "query"):
                schema = self._resolve(spec, parameter.get("schema") or parameter)
                parameters.append(
                    ParameterDescriptor(
                        name=parameter["name"],
                        location=ParameterLocation(location),
                        data_type=DataType.from_schema(schema),
                        required=location == "path" or bool(parameter.get("required")),
                        description=parameter.get("description") or "",
                    )
                )
            elif location == "body":
                parameters.extend(
                    self._body_parameters(
                        spec, parameter.get("schema") or {}, bool(parameter.get("required"))
                    )
                )
            elif location == "formData":
                parameters.append(
                    ParameterDescriptor(
                        name=parameter["name"],
                        location=ParameterLocation.BODY,
                        data_type=DataType.from_schema(parameter),
                        required=bool(parameter.get("required")),
                        description=parameter.get("description") or "",
                    )
                )
            else:
                logger.debug("Ignoring %s parameter %s", location, parameter["name"])

        request_body = self._resolve(spec, operation.get("requestBody") or {})
        body_schema = self._extract_body_schema(request_body)
        if body_schema is not None:
            parameters.extend(
                self._body_parameters(spec, body_schema, bool(request_body.get("required")))
            )

        return self._dedupe(operation, parameters)

    def _body_parameters(
        self, spec: Dict[str, Any], schema: Dict[str, Any], body_required: bool
    ) -> List[ParameterDescriptor]:
        schema = self._merge_all_of(spec, self._resolve(spec, schema))
        properties = schema.get("properties") or {}
        if not properties:
            return [
                ParameterDescriptor(
                    name="body",
                    location=ParameterLocation.BODY,
                    data_type=DataType.from_schema(schema),
                    required=body_required,
                    description=schema.get("description") or "Request body",
                )
            ]

        required = set(schema.get("required") or [])
        parameters: List[ParameterDescriptor] = []
        for name, prop in properties.items():
            prop = self._resolve(spec, prop or {})
            if prop.get("readOnly"):
                continue
            parameters.append(
                ParameterDescriptor(
                    name=name,
                    location=ParameterLocation.BODY,
                    data_type=DataType.from_schema(prop),
                    required=name in required,
                    description=prop.get("description") or "",
                )
            )
        return parameters

    def _extract_body_schema(self, request_body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        content = request_body.get("content") or {}
        if not content:
            return None
        media = content.get("application/json") or next(iter(content.values())) or {}
        return media.get("schema")

    def _merge_all_of(self, spec: Dict[str, Any], schema: Dict[str, Any]) -> Dict[str, Any]:
        if "allOf" not in schema:
            return schema
        merged: Dict[str, Any] = {"type": "object", "properties": {}, "required": []}
        for part in schema["allOf"]:
            part = self._merge_all_of(spec, self._resolve(spec, part))
            merged["properties"].update(part.get("properties") or {})
            merged["required"].extend(part.get("required") or [])
        merged["properties"].update(schema.get("properties") or {})
        merged["required"].extend(schema.get("required") or [])
        return merged

    def _dedupe(
        self, operation: Dict[str, Any], parameters: List[ParameterDescriptor]
    ) -> List[ParameterDescriptor]:
        seen: Dict[str, ParameterDescriptor] = {}
        for parameter in parameters:
            if parameter.name in seen:
                logger.warning(
                    "Parameter %s of %s declared in both %s and %s; keeping %s",
                    parameter.name,
                    operation.get("operationId", "<anonymous>"),
                    seen[parameter.name].location.value,
                    parameter.location.value,
                    seen[parameter.name].location.value,
                )
                continue
            seen[parameter.name] = parameter
        return list(seen.values())

    def _resolve(self, spec: Dict[str, Any], node: Any) -> Dict[str, Any]:
        seen = set()
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if ref in seen or not ref.startswith("#/"):
                logger.warning("Cannot resolve $ref %s", ref)
                return {}
            seen.add(ref)
            target: Any = spec
            for part in ref[2:].split("/"):
                part = part.replace("~1", "/").replace("~0", "~")
                target = target.get(part) if isinstance(target, dict) else None
            node = target
        return node if isinstance(node, dict) else {}

    def _fallback_operation_id(self, method: str, path: str) -> str:
        sanitized = path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
        return f"{method.lower()}_{sanitized or 'root'}"
