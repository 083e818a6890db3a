"""Pytest configuration and shared fixtures."""

from typing import Callable, List

import httpx
import pytest

from openapi_mcp_adapter.auth import TokenResolver
from openapi_mcp_adapter.compiler import ToolCompiler
from openapi_mcp_adapter.dispatcher import RequestDispatcher
from openapi_mcp_adapter.models import (
    DataType,
    OperationDescriptor,
    ParameterDescriptor,
    ParameterLocation,
)

BASE_URL = "https://api.example.com"
USER_AGENT = "openapi-mcp-adapter/0.1.0"

Responder = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def token_resolver() -> TokenResolver:
    """Resolver with a token in the primary variable and no CLI flag."""
    return TokenResolver(environ={"API_TOKEN": "test-token"}, argv=[])


@pytest.fixture
def sent_requests() -> List[httpx.Request]:
    """Requests captured by the mock transport."""
    return []


@pytest.fixture
def make_dispatcher(
    token_resolver: TokenResolver, sent_requests: List[httpx.Request]
) -> Callable[..., RequestDispatcher]:
    """Build a dispatcher whose HTTP traffic is answered by ``responder``."""

    def factory(responder: Responder, resolver: TokenResolver = None) -> RequestDispatcher:
        def handle(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            return responder(request)

        return RequestDispatcher(
            BASE_URL,
            resolver or token_resolver,
            USER_AGENT,
            transport=httpx.MockTransport(handle),
        )

    return factory


@pytest.fixture
def make_compiler(make_dispatcher) -> Callable[..., ToolCompiler]:
    """Build a compiler on top of a mocked dispatcher."""

    def factory(responder: Responder, resolver: TokenResolver = None) -> ToolCompiler:
        return ToolCompiler(make_dispatcher(responder, resolver))

    return factory


@pytest.fixture
def get_user_operation() -> OperationDescriptor:
    """GET /users/{id} with a single required path parameter."""
    return OperationDescriptor(
        operation_id="getUser",
        method="GET",
        path="/users/{id}",
        summary="Get user",
        parameters=(
            ParameterDescriptor(
                name="id",
                location=ParameterLocation.PATH,
                required=True,
                description="User identifier",
            ),
        ),
    )


@pytest.fixture
def create_post_operation() -> OperationDescriptor:
    """POST /users/{userId}/posts with path, query and body parameters."""
    return OperationDescriptor(
        operation_id="createPost",
        method="POST",
        path="/users/{userId}/posts",
        summary="Create post",
        description="Publishes a new post for the user",
        parameters=(
            ParameterDescriptor("userId", ParameterLocation.PATH, DataType.STRING, True, "Owner"),
            ParameterDescriptor("notify", ParameterLocation.QUERY, DataType.BOOLEAN, False, ""),
            ParameterDescriptor("title", ParameterLocation.BODY, DataType.STRING, True, "Title"),
            ParameterDescriptor("tags", ParameterLocation.BODY, DataType.ARRAY, False, "Tags"),
        ),
    )


@pytest.fixture
def sample_openapi_yaml() -> str:
    """Sample OpenAPI 3 document."""
    return """
openapi: 3.0.3
info:
  title: Users API
  version: 1.0.0

servers:
  - url: https://{region}.example.com/v1
    variables:
      region:
        default: eu

components:
  parameters:
    Limit:
      name: limit
      in: query
      schema:
        type: integer
      description: Page size
  schemas:
    NewUser:
      type: object
      required:
        - name
      properties:
        id:
          type: string
          readOnly: true
        name:
          type: string
          description: Display name
        age:
          type: integer
        roles:
          type: array
          items:
            type: string
        profile:
          $ref: '#/components/schemas/Profile'
    Profile:
      type: object
      properties:
        bio:
          type: string

paths:
  /users:
    get:
      summary: List users
      operationId: listUsers
      parameters:
        - $ref: '#/components/parameters/Limit'
        - name: active
          in: query
          schema:
            type: boolean
        - name: X-Request-Id
          in: header
          schema:
            type: string
      responses:
        '200':
          description: Success
    post:
      summary: Create user
      description: Registers a new user
      operationId: createUser
      requestBody:
        required: true
        content:
          application/json:
            schema:
              $ref: '#/components/schemas/NewUser'
      responses:
        '201':
          description: Created

  /users/{id}:
    parameters:
      - name: id
        in: path
        description: User identifier
        schema:
          type: string
    get:
      summary: Get user
      operationId: getUser
      responses:
        '200':
          description: Success
    delete:
      summary: Delete user
      responses:
        '204':
          description: Deleted
"""
