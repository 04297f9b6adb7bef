import json
from pathlib import Path

import pytest

from routedoc.project.graph import TypeGraph, TypeGraphError, TypeGraphSession, load_graph, open_session

FIXTURES = Path(__file__).parent / "fixtures"


class TestLoadGraph:
    def test_load_yaml_fixture(self):
        graph = load_graph(FIXTURES / "app_types.yaml")
        assert "src/app.ts" in graph.files
        assert "User" in graph.declarations

    def test_load_json(self, tmp_path):
        f = tmp_path / "types.json"
        f.write_text(json.dumps({"files": {"a.ts": {"aliases": {"App": "string"}}}}))
        graph = load_graph(f)
        assert list(graph.files) == ["a.ts"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(TypeGraphError, match="cannot read"):
            load_graph(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("types: [unclosed\n")
        with pytest.raises(TypeGraphError, match="cannot parse"):
            load_graph(f)

    def test_not_a_mapping(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(TypeGraphError, match="must be a mapping"):
            load_graph(f)

    def test_unknown_kind(self):
        with pytest.raises(TypeGraphError, match="unknown type kind 'enum'"):
            TypeGraph({"types": {"Color": {"kind": "enum"}}})

    def test_reference_without_name(self):
        with pytest.raises(TypeGraphError, match="reference has no 'name'"):
            TypeGraph({"types": {"P": {"kind": "object", "properties": {"x": {"kind": "reference"}}}}})

    def test_node_without_kind(self):
        with pytest.raises(TypeGraphError, match="types.Bad.element"):
            TypeGraph({"types": {"Bad": {"kind": "array", "element": {"foo": 1}}}})


class TestGraphType:
    def test_primitive_text(self):
        graph = TypeGraph({})
        assert graph.handle("string").text() == "string"
        assert graph.handle(True).text() == "true"
        assert graph.handle(None).text() == "unknown"

    def test_declaration_handles_are_shared(self):
        graph = TypeGraph({"types": {"User": {"kind": "object"}}})
        assert graph.handle("User") is graph.handle("User")
        assert graph.handle("User").symbol().name == "User"

    def test_raw_text_keeps_checker_duplicates(self):
        graph = TypeGraph({})
        handle = graph.handle({"kind": "union", "members": ["string", "undefined", "undefined"]})
        assert handle.text() == "string | undefined | undefined"

    def test_raw_text_of_compound_array(self):
        graph = TypeGraph({})
        handle = graph.handle({"kind": "array", "element": {"kind": "union", "members": ["string", "number"]}})
        assert handle.text() == "(string | number)[]"

    def test_raw_object_text(self):
        graph = TypeGraph({"types": {"User": {"kind": "object", "properties": {"id": "number"}}}})
        handle = graph.handle({
            "kind": "object",
            "properties": {"user": "User", "x-trace": {"type": "string", "optional": True}},
        })
        assert handle.text() == '{ user: User; "x-trace"?: string }'

    def test_reference_text(self):
        graph = TypeGraph({})
        handle = graph.handle({"kind": "reference", "name": "Record", "args": ["string", "number"]})
        assert handle.text() == "Record<string, number>"
        assert [a.text() for a in handle.symbol().type_args] == ["string", "number"]

    def test_intersection_merges_duplicate_keys(self):
        graph = TypeGraph({})
        handle = graph.handle({
            "kind": "intersection",
            "members": [
                {"kind": "object", "properties": {"id": {"type": "string", "optional": True}, "a": "number"}},
                {"kind": "object", "properties": {"id": "string"}},
            ],
        })
        props = handle.properties()
        assert [p.name for p in props] == ["id", "a"]
        assert props[0].optional is False
        assert props[0].type.is_intersection()

    def test_anonymous_cycle_renders(self):
        node = {"kind": "object", "properties": {}}
        node["properties"]["self"] = node
        handle = TypeGraph({}).handle(node)
        assert handle.text() == "{ self: any }"


class TestSession:
    def test_add_and_lookup(self):
        with open_session(FIXTURES / "app_types.yaml") as session:
            assert session.source_file("src/app.ts") is None
            source = session.add_source_file("./src/app.ts")
            assert source is not None
            assert session.source_file("src/app.ts") is source
            assert source.type_alias("App") is not None
            assert source.type_alias("Missing") is None

    def test_unknown_file(self):
        session = TypeGraphSession(load_graph(FIXTURES / "app_types.yaml"))
        assert session.add_source_file("src/missing.ts") is None

    def test_glob(self):
        session = TypeGraphSession(load_graph(FIXTURES / "app_types.yaml"))
        loaded = session.add_source_files("src/routes/*.ts")
        assert sorted(s.path for s in loaded) == ["src/routes/admin.ts", "src/routes/legacy.ts"]
        assert session.source_file("src/app.ts") is None

    def test_closed_session(self):
        with open_session(FIXTURES / "app_types.yaml") as session:
            pass
        assert session.closed
        with pytest.raises(TypeGraphError, match="closed"):
            session.source_file("src/app.ts")
