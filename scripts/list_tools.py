"""Print the MCP tools an OpenAPI document compiles to, without serving them."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from typing import Any, Dict, List

from openapi_mcp_adapter.auth import TokenResolver
from openapi_mcp_adapter.compiler import ToolCompiler
from openapi_mcp_adapter.dispatcher import RequestDispatcher
from openapi_mcp_adapter.openapi import OpenAPILoader
from openapi_mcp_adapter.tool_registry import build_registry


async def _list_tools(source: str, allowlist: set[str]) -> List[Dict[str, Any]]:
    loader = OpenAPILoader()
    spec = await loader.load_spec(source)
    base_url = loader.extract_server_url(spec) or "http://localhost"
    # Never dispatches, so the resolver is never asked for a token.
    dispatcher = RequestDispatcher(base_url, TokenResolver(), user_agent="list-tools")
    registry = build_registry(
        loader.extract_operations(spec), ToolCompiler(dispatcher), allowlist=allowlist
    )
    return [
        {"name": tool.name, "description": tool.description, "schema": tool.schema}
        for tool in registry
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="List tools compiled from an OpenAPI document")
    parser.add_argument(
        "--spec",
        default=os.getenv("OPENAPI_SPEC", "openapi.yaml"),
        help="Path or URL of the OpenAPI document",
    )
    parser.add_argument(
        "--only",
        default="",
        help="Comma-separated operation ids to include",
    )
    parser.add_argument("--names", action="store_true", help="Print tool names only")
    args = parser.parse_args()

    allowlist = {item.strip() for item in args.only.split(",") if item.strip()}
    tools = asyncio.run(_list_tools(args.spec, allowlist))

    if args.names:
        for tool in tools:
            print(tool["name"])
        return
    print(json.dumps(tools, indent=2))


if __name__ == "__main__":
    main()
