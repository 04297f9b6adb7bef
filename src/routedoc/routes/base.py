"""Endpoint records produced by the route tree walker."""

from enum import Enum

from pydantic import BaseModel


class HttpMethod(str, Enum):
    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"


HTTP_METHODS = frozenset(m.value for m in HttpMethod)


class EndpointRecord(BaseModel):
    """One documented (path, method) pair and its type expressions."""

    path: str  # /users/:id
    method: HttpMethod
    body: str | None = None
    params: str | None = None
    query: str | None = None
    response: str = "{}"

    @property
    def title(self) -> str:
        return f"{self.method.value.upper()} {self.path}"
