"""Route tree walker — discovers endpoints in a route descriptor type.

A route descriptor nests one property per path segment; HTTP method
properties carry the endpoint's body/params/query/response types.
"""

from routedoc.routes.base import HTTP_METHODS, EndpointRecord, HttpMethod
from routedoc.routes.params import resolve_path_helper
from routedoc.types.base import TypeHandle
from routedoc.types.normalize import TypeNormalizer

NESTED_ROUTES = "~Routes"

INTERNAL_PROPS = frozenset({
    "decorator",
    "store",
    "derive",
    "resolve",
    "schema",
    "standaloneSchema",
    "response",
})

# framework-private and compiler-private prefixes
PRIVATE_PREFIXES = ("~", "_")

PARAM_MARKER = ":"

# Bound for hosts whose handles have no stable identity
MAX_ROUTE_DEPTH = 64

# Defaults for missing method descriptor entries; a part equal to its default is absent
DEFAULTS = {
    "body": "unknown",
    "params": "{}",
    "query": "unknown",
    "response": "{}",
}


class RouteTreeWalker:
    """Walks a route descriptor and emits endpoint records in declaration order."""

    def __init__(self, normalizer: TypeNormalizer | None = None):
        self.normalizer = normalizer or TypeNormalizer()

    def walk(self, node: TypeHandle, path: str = "") -> list[EndpointRecord]:
        records: list[EndpointRecord] = []
        self._walk(node, path, records, ())
        return records

    def _walk(self, node: TypeHandle, path: str, records: list[EndpointRecord], ancestors: tuple[int, ...]) -> None:
        # A node already on the descent path would repeat forever
        if id(node) in ancestors or len(ancestors) > MAX_ROUTE_DEPTH:
            return
        ancestors = (*ancestors, id(node))

        for prop in node.properties():
            name = prop.name

            if name in HTTP_METHODS:
                # A method with no path segment is a catch-all placeholder
                if path:
                    records.append(self._endpoint(prop.type, path, HttpMethod(name)))
            elif name == NESTED_ROUTES:
                self._walk(prop.type, path, records, ancestors)
            elif name in INTERNAL_PROPS or name.startswith(PRIVATE_PREFIXES):
                continue
            else:
                separator = "" if name.startswith(PARAM_MARKER) and not path else "/"
                self._walk(prop.type, f"{path}{separator}{name}", records, ancestors)

    def _endpoint(self, descriptor: TypeHandle, path: str, method: HttpMethod) -> EndpointRecord:
        parts = dict(DEFAULTS)
        for prop in descriptor.properties():
            if prop.name in parts:
                parts[prop.name] = self.normalizer.normalize(prop.type)

        repaired = resolve_path_helper(parts["params"], path)
        if repaired is not None:
            parts["params"] = repaired

        return EndpointRecord(
            path=path,
            method=method,
            body=_present(parts, "body"),
            params=_present(parts, "params"),
            query=_present(parts, "query"),
            response=parts["response"],
        )


def _present(parts: dict[str, str], key: str) -> str | None:
    value = parts[key]
    return None if value == DEFAULTS[key] else value


def walk_routes(node: TypeHandle, path: str = "") -> list[EndpointRecord]:
    """Walk ``node`` with a default normalizer."""
    return RouteTreeWalker().walk(node, path)
