"""MCP server setup for the OpenAPI MCP Adapter."""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastmcp import FastMCP
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import Field

from .auth import TokenResolver
from .compiler import ToolCompiler
from .config import Settings
from .dispatcher import RequestDispatcher
from .errors import CatalogError
from .models import Envelope, ToolDescriptor
from .openapi import OpenAPILoader
from .tool_registry import ToolRegistry, build_registry

logger = logging.getLogger(__name__)


class CompiledTool(Tool):
    """FastMCP tool that hands raw arguments to a compiled handler.

    Arguments are not validated against ``parameters`` here: the handler
    checks required parameters itself and reports them as a failure envelope.
    """

    handler: Callable[..., Awaitable[Envelope]] = Field(exclude=True)

    @classmethod
    def from_descriptor(cls, tool: ToolDescriptor) -> "CompiledTool":
        return cls(
            name=tool.name,
            description=tool.description,
            parameters=input_schema(tool.schema),
            handler=tool.handler,
        )

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        envelope = await self.handler(arguments)
        return ToolResult(
            content=[TextContent(type="text", text=block["text"]) for block in envelope["content"]]
        )


def input_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """JSON Schema form of a tool schema: ``required`` only as the top-level list."""
    properties = {
        name: {key: value for key, value in prop.items() if key != "required"}
        for name, prop in schema.get("properties", {}).items()
    }
    return {**schema, "properties": properties, "required": list(schema.get("required", []))}


async def build_server(settings: Settings) -> tuple[FastMCP, object | None]:
    loader = OpenAPILoader()
    spec = await loader.load_spec(settings.openapi_spec)
    operations = loader.extract_operations(spec)

    base_url = settings.api_base_url or loader.extract_server_url(spec)
    if not base_url:
        raise CatalogError(
            f"No base URL: set API_BASE_URL or add servers to {settings.openapi_spec}"
        )

    token_resolver = TokenResolver(
        primary_env_var=settings.token_env_var,
        secondary_env_var=settings.fallback_token_env_var,
    )
    dispatcher = RequestDispatcher(
        base_url=base_url,
        token_resolver=token_resolver,
        user_agent=settings.user_agent,
    )
    registry = build_registry(
        operations, ToolCompiler(dispatcher), allowlist=settings.operation_allowlist()
    )

    mcp = FastMCP(settings.service_name, instructions=_instructions(spec, base_url))
    register_tools(mcp, registry)

    app = _get_http_app(mcp, settings)
    _attach_healthcheck(app)

    return mcp, app


def register_tools(mcp: FastMCP, registry: ToolRegistry) -> None:
    for tool in registry:
        mcp.add_tool(CompiledTool.from_descriptor(tool))
        logger.info("Registered MCP tool: %s", tool.name)
    logger.info("Available tools: %s", ", ".join(registry.names()))


def _instructions(spec: dict, base_url: str) -> str:
    info = spec.get("info") or {}
    title = info.get("title") or "API"
    return (
        f"Tools generated from the {title} OpenAPI document. "
        f"Each tool calls one operation of {base_url}."
    )


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.adapter_transport.lower()
    if transport in {"http"}:
        app = mcp.http_app(transport="http", stateless_http=True, json_response=True)
        _attach_cors(app)
        return app
    if transport in {"streamable-http", "streamablehttp"}:
        app = mcp.http_app(
            transport="streamable-http", stateless_http=True, json_response=True
        )
        _attach_cors(app)
        return app
    if transport in {"sse"}:
        app = mcp.http_app(transport="sse")
        _attach_cors(app)
        return app
    return None


def _attach_cors(app: Optional[object]) -> None:
    if not app:
        return
    from starlette.middleware.cors import CORSMiddleware

    app.add_middleware(  # type: ignore[attr-defined]
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
