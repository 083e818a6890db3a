"""Configuration for the OpenAPI MCP Adapter."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Set

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    service_name: str = Field(default="openapi-mcp-adapter")
    service_version: str = Field(default="0.1.0")

    openapi_spec: str = Field(default="openapi.yaml")
    api_base_url: Optional[str] = Field(default=None)

    token_env_var: str = Field(default="API_TOKEN")
    fallback_token_env_var: str = Field(default="ACCESS_TOKEN")

    adapter_transport: str = Field(default="stdio")
    adapter_host: str = Field(default="0.0.0.0")
    adapter_port: int = Field(default=8000)

    adapter_operation_allowlist: Optional[str] = Field(default=None)

    log_level: str = Field(default="INFO")

    @property
    def user_agent(self) -> str:
        return f"{self.service_name}/{self.service_version}"

    def operation_allowlist(self) -> Set[str]:
        if not self.adapter_operation_allowlist:
            return set()
        return {
            item.strip()
            for item in self.adapter_operation_allowlist.split(",")
            if item.strip()
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
