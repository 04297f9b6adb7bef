"""Type graph documents — the host type model behind the type handles.

A type graph is a YAML or JSON dump of a backend project's resolved types:
which source files export which type aliases, and what those aliases look
like. It is loaded through a ``TypeGraphSession`` scoped to one documentation
run.
"""

import fnmatch
import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from routedoc.types.base import NamedSymbol, PropertyHandle

log = logging.getLogger(__name__)

KINDS = frozenset({"primitive", "array", "tuple", "union", "intersection", "object", "reference"})


class TypeGraphError(Exception):
    """The type graph document is missing, unreadable or malformed."""


class SourceFileNotFoundError(LookupError):
    """A service's entry file is not part of the loaded type graph."""


class TypeAliasNotFoundError(LookupError):
    """The route descriptor alias is not exported by the entry file."""


class GraphType:
    """A type handle backed by a node of a type graph document."""

    def __init__(self, graph: "TypeGraph", node: dict, name: str | None = None):
        self.graph = graph
        self.node = node
        self.name = name
        self._rendering = False

    def __repr__(self) -> str:
        return f"GraphType({self.name or self.kind!r})"

    @property
    def kind(self) -> str:
        return self.node.get("kind", "primitive")

    def is_array(self) -> bool:
        return self.kind == "array"

    def is_tuple(self) -> bool:
        return self.kind == "tuple"

    def is_union(self) -> bool:
        return self.kind == "union"

    def is_intersection(self) -> bool:
        return self.kind == "intersection"

    def is_object(self) -> bool:
        return self.kind == "object"

    def element_type(self) -> "GraphType | None":
        if "element" not in self.node:
            return None
        return self.graph.handle(self.node["element"])

    def tuple_elements(self) -> list["GraphType"]:
        return [self.graph.handle(spec) for spec in self.node.get("elements", [])]

    def member_types(self) -> list["GraphType"]:
        return [self.graph.handle(spec) for spec in self.node.get("members", [])]

    def properties(self) -> list[PropertyHandle]:
        if self.is_object():
            return [_property(self.graph, key, value) for key, value in (self.node.get("properties") or {}).items()]
        if self.is_intersection():
            return self._merged_properties()
        return []

    def number_index_type(self) -> "GraphType | None":
        if "number_index" not in self.node:
            return None
        return self.graph.handle(self.node["number_index"])

    def call_signature_count(self) -> int:
        return int(self.node.get("call_signatures", 0))

    def symbol(self) -> NamedSymbol | None:
        if self.kind == "reference":
            args = tuple(self.graph.handle(spec) for spec in self.node.get("args", []))
            return NamedSymbol(self.node["name"], args)
        if self.name:
            return NamedSymbol(self.name)
        return None

    def text(self) -> str:
        if "text" in self.node:
            return str(self.node["text"])
        if self.name:
            return self.name
        # Anonymous cycles can only come from YAML anchors
        if self._rendering:
            return "any"
        self._rendering = True
        try:
            return self._render()
        finally:
            self._rendering = False

    def _render(self) -> str:
        kind = self.kind
        if kind == "primitive":
            return str(self.node.get("value", "unknown"))
        if kind == "array":
            element = self.element_type()
            if element is None:
                return "unknown[]"
            inner = element.text()
            if element.is_union() or element.is_intersection():
                return f"({inner})[]"
            return f"{inner}[]"
        if kind == "tuple":
            return "[" + ", ".join(t.text() for t in self.tuple_elements()) + "]"
        if kind == "union":
            return " | ".join(t.text() for t in self.member_types())
        if kind == "intersection":
            return " & ".join(t.text() for t in self.member_types())
        if kind == "reference":
            symbol = self.symbol()
            if symbol.type_args:
                return f"{symbol.name}<{', '.join(t.text() for t in symbol.type_args)}>"
            return symbol.name

        props = self.properties()
        if not props:
            return "(...args: any[]) => any" if self.call_signature_count() else "{}"
        entries = []
        for prop in props:
            optional = "?" if prop.optional else ""
            entries.append(f"{_render_key(prop.name)}{optional}: {prop.type.text()}")
        return "{ " + "; ".join(entries) + " }"

    def _merged_properties(self) -> list[PropertyHandle]:
        merged: dict[str, list[PropertyHandle]] = {}
        for member in self.member_types():
            for prop in member.properties():
                merged.setdefault(prop.name, []).append(prop)

        result = []
        for name, props in merged.items():
            if len(props) == 1:
                result.append(props[0])
                continue
            combined = GraphType(self.graph, {"kind": "intersection", "members": [p.type for p in props]})
            result.append(PropertyHandle(name, combined, all(p.optional for p in props)))
        return result


def _property(graph: "TypeGraph", key: str, value: Any) -> PropertyHandle:
    if isinstance(value, dict) and "kind" not in value and "type" in value:
        return PropertyHandle(str(key), graph.handle(value["type"]), bool(value.get("optional", False)))
    return PropertyHandle(str(key), graph.handle(value))


def _render_key(name: str) -> str:
    if name and (name[0].isalpha() or name[0] in "_$") and all(c.isalnum() or c in "_$" for c in name):
        return name
    return json.dumps(name)


class TypeGraph:
    """An in-memory type graph document."""

    def __init__(self, data: dict, source: str = "<memory>"):
        if not isinstance(data, dict):
            raise TypeGraphError(f"{source}: type graph must be a mapping")
        self.source = source
        self.files: dict[str, dict] = {_file_key(k): v or {} for k, v in (data.get("files") or {}).items()}
        self.declarations: dict[str, Any] = dict(data.get("types") or {})
        self._handles: dict[int | str, GraphType] = {}
        self._validate()

    def handle(self, spec: Any) -> GraphType:
        """Return the handle for a type spec, reusing handles for the same node."""
        if isinstance(spec, GraphType):
            return spec
        if isinstance(spec, str) and spec in self.declarations:
            if spec not in self._handles:
                self._handles[spec] = GraphType(self, self._node(self.declarations[spec]), name=spec)
            return self._handles[spec]
        if isinstance(spec, dict):
            key = id(spec)
            if key not in self._handles:
                self._handles[key] = GraphType(self, spec)
            return self._handles[key]
        return GraphType(self, self._node(spec))

    def _node(self, spec: Any) -> dict:
        if isinstance(spec, dict):
            return spec
        if isinstance(spec, str) and spec in self.declarations:
            # alias of an alias
            return self._node(self.declarations[spec])
        if spec is None:
            return {"kind": "primitive", "value": "unknown"}
        if isinstance(spec, bool):
            return {"kind": "primitive", "value": "true" if spec else "false"}
        return {"kind": "primitive", "value": str(spec)}

    def _validate(self) -> None:
        seen: set[int] = set()
        for name, spec in self.declarations.items():
            self._check(spec, f"types.{name}", seen)
        for path, entry in self.files.items():
            for alias, spec in (entry.get("aliases") or {}).items():
                self._check(spec, f"files.{path}.aliases.{alias}", seen)

    def _check(self, spec: Any, where: str, seen: set[int]) -> None:
        if isinstance(spec, list):
            for i, item in enumerate(spec):
                self._check(item, f"{where}[{i}]", seen)
            return
        if not isinstance(spec, dict) or id(spec) in seen:
            return
        seen.add(id(spec))

        if "kind" not in spec:
            if "type" in spec:
                self._check(spec["type"], where, seen)
                return
            raise TypeGraphError(f"{self.source}: {where}: type node has no 'kind'")

        kind = spec["kind"]
        if kind not in KINDS:
            raise TypeGraphError(f"{self.source}: {where}: unknown type kind {kind!r}")
        if kind == "reference" and "name" not in spec:
            raise TypeGraphError(f"{self.source}: {where}: reference has no 'name'")

        for key in ("element", "number_index"):
            if key in spec:
                self._check(spec[key], f"{where}.{key}", seen)
        for key in ("elements", "members", "args"):
            if key in spec:
                self._check(spec[key], f"{where}.{key}", seen)
        for prop, value in (spec.get("properties") or {}).items():
            self._check(value, f"{where}.{prop}", seen)


def _file_key(path: str | Path) -> str:
    return PurePosixPath(str(path).replace("\\", "/")).as_posix()


def load_graph(path: Path) -> TypeGraph:
    """Load a type graph from a ``.json``, ``.yaml`` or ``.yml`` file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TypeGraphError(f"cannot read type graph {path}: {e}") from e

    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TypeGraphError(f"cannot parse type graph {path}: {e}") from e

    graph = TypeGraph(data, source=str(path))
    log.debug("Loaded type graph %s (%d files, %d declarations)", path, len(graph.files), len(graph.declarations))
    return graph


class SourceFile:
    """A source file of the type graph and the aliases it exports."""

    def __init__(self, graph: TypeGraph, path: str):
        self.graph = graph
        self.path = path

    def type_alias(self, name: str) -> GraphType | None:
        aliases = self.graph.files[self.path].get("aliases") or {}
        if name not in aliases:
            return None
        return self.graph.handle(aliases[name])


class TypeGraphSession:
    """Source files loaded from one type graph for one documentation run."""

    def __init__(self, graph: TypeGraph):
        self.graph = graph
        self._files: dict[str, SourceFile] | None = {}

    def __enter__(self) -> "TypeGraphSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._files is None

    def add_source_file(self, path: str | Path) -> SourceFile | None:
        """Load one file into the session; None if the graph has no such file."""
        files = self._loaded()
        key = _file_key(path)
        if key not in self.graph.files:
            return None
        files.setdefault(key, SourceFile(self.graph, key))
        return files[key]

    def add_source_files(self, pattern: str) -> list[SourceFile]:
        """Load every file whose path matches the glob ``pattern``."""
        pattern = _file_key(pattern)
        return [self.add_source_file(key) for key in self.graph.files if fnmatch.fnmatchcase(key, pattern)]

    def source_file(self, path: str | Path) -> SourceFile | None:
        return self._loaded().get(_file_key(path))

    def close(self) -> None:
        self._files = None

    def _loaded(self) -> dict[str, SourceFile]:
        if self._files is None:
            raise TypeGraphError("type graph session is closed")
        return self._files


def open_session(path: Path) -> TypeGraphSession:
    """Load the type graph at ``path`` and open a session over it."""
    return TypeGraphSession(load_graph(path))
