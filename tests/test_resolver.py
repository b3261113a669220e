"""Tests for external file resolution, dereferencing and bundling."""

import json
from pathlib import Path

import pytest
import yaml

from oasbuilder.context import BuildContext
from oasbuilder.core.resolver import (
    bundle,
    collect_external_files,
    dereference,
    resolve_external_file,
    resolve_external_files,
    scratch_directory,
    to_uri,
)
from oasbuilder.exceptions import ResolutionError
from oasbuilder.routes import (
    DefinedRoute,
    ExternalOperation,
    ReferencedRoute,
    RouteResponse,
    Validation,
)
from oasbuilder.schema import builders as oas
from oasbuilder.transformers.walk import iter_refs

DEFINITIONS = {
    "definitions": {
        "Widget": {
            "type": "object",
            "properties": {"part": {"$ref": "#/definitions/Part"}},
        },
        "Part": {"type": "string"},
    }
}


@pytest.fixture
def definitions_file(tmp_path: Path) -> Path:
    path = tmp_path / "defs.json"
    path.write_text(json.dumps(DEFINITIONS), encoding="utf-8")
    return path


def _route_with(body) -> DefinedRoute:
    return DefinedRoute(
        operation_id="op",
        description="Operation",
        method="POST",
        path="/things",
        validation=Validation(body=body),
        success_response=RouteResponse(status_code=204, description="Done"),
    )


class TestScratchDirectory:
    """Tests for the scratch_directory context manager."""

    def test_removed_after_use(self):
        with scratch_directory() as path:
            (path / "file.json").write_text("{}")
            assert path.is_dir()

        assert not path.exists()

    def test_removed_after_failure(self):
        with pytest.raises(RuntimeError):
            with scratch_directory() as path:
                raise RuntimeError("boom")

        assert not path.exists()


class TestToUri:
    def test_path_becomes_file_uri(self, tmp_path):
        assert to_uri(str(tmp_path / "a.json")) == (tmp_path / "a.json").resolve().as_uri()

    def test_url_passes_through(self):
        assert to_uri("https://example.com/a.json") == "https://example.com/a.json"


class TestCollectExternalFiles:
    """Tests for collect_external_files."""

    def test_files_from_nodes_and_referenced_routes(self):
        routes = [
            _route_with(
                oas.object(
                    {
                        "a": oas.ref(file="a.json", path="/x"),
                        "b": oas.array().items(oas.ref(file="b.yaml", path="/y")),
                        "again": oas.ref(file="a.json", path="/z"),
                    }
                )
            ),
            ReferencedRoute(
                method="GET", path="/r", ref=ExternalOperation(file="routes.json", path="/p")
            ),
        ]

        assert collect_external_files(routes) == ["a.json", "b.yaml", "routes.json"]

    def test_reference_inside_label_and_headers(self):
        route = DefinedRoute(
            operation_id="op",
            description="Operation",
            method="GET",
            path="/things",
            success_response=RouteResponse(
                status_code=200,
                description="OK",
                schema=oas.object({"w": oas.ref(file="w.json", path="/w")}).label("W"),
                headers=oas.object({"X-H": oas.ref(file="h.json", path="/h")}),
            ),
        )

        assert collect_external_files([route]) == ["w.json", "h.json"]


class TestResolveExternalFile:
    """Tests for resolve_external_file."""

    def test_copy_is_self_contained(self, definitions_file, tmp_path):
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        resolved = Path(resolve_external_file(str(definitions_file), scratch))

        assert resolved.parent == scratch
        assert resolved.name.startswith("defs-")
        assert resolved.suffix == ".json"
        content = json.loads(resolved.read_text(encoding="utf-8"))
        assert content["definitions"]["Widget"]["properties"]["part"] == {"type": "string"}
        assert list(iter_refs(content)) == []

    def test_yaml_source(self, tmp_path):
        source = tmp_path / "defs.yaml"
        source.write_text(yaml.safe_dump(DEFINITIONS), encoding="utf-8")
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        resolved = Path(resolve_external_file(str(source), scratch))

        assert json.loads(resolved.read_text())["definitions"]["Part"] == {"type": "string"}

    def test_relative_reference_to_sibling_file(self, tmp_path):
        (tmp_path / "common.json").write_text(json.dumps({"Id": {"type": "string"}}))
        (tmp_path / "main.json").write_text(json.dumps({"Item": {"$ref": "common.json#/Id"}}))
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        resolved = Path(resolve_external_file(str(tmp_path / "main.json"), scratch))

        assert json.loads(resolved.read_text()) == {"Item": {"type": "string"}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResolutionError) as exc_info:
            resolve_external_file(str(tmp_path / "missing.json"), tmp_path)

        assert "missing.json" in exc_info.value.file

    def test_invalid_json(self, tmp_path):
        source = tmp_path / "broken.json"
        source.write_text("{not json", encoding="utf-8")

        with pytest.raises(ResolutionError):
            resolve_external_file(str(source), tmp_path)

    def test_unresolvable_pointer(self, tmp_path):
        source = tmp_path / "dangling.json"
        source.write_text(json.dumps({"a": {"$ref": "#/nowhere"}}), encoding="utf-8")

        with pytest.raises(ResolutionError):
            resolve_external_file(str(source), tmp_path)


class TestResolveExternalFiles:
    """Tests for resolve_external_files."""

    def test_records_every_file_and_renders_reference(self, definitions_file, tmp_path):
        node = oas.ref(file=str(definitions_file), path="/definitions/Widget")
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        ctx = BuildContext()

        resolve_external_files([_route_with(node)], scratch, ctx)

        resolved = ctx.resolved_files[str(definitions_file)]
        assert Path(resolved).parent == scratch
        assert node.to_schema(ctx) == {"$ref": f"{resolved}#/definitions/Widget"}

    def test_same_base_name_does_not_collide(self, tmp_path):
        first = tmp_path / "one" / "defs.json"
        second = tmp_path / "two" / "defs.json"
        for path in (first, second):
            path.parent.mkdir()
            path.write_text(json.dumps(DEFINITIONS), encoding="utf-8")
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        ctx = BuildContext()
        body = oas.object(
            {"a": oas.ref(file=str(first), path="/x"), "b": oas.ref(file=str(second), path="/x")}
        )

        resolve_external_files([_route_with(body)], scratch, ctx)

        assert len(set(ctx.resolved_files.values())) == 2
        assert len(list(scratch.iterdir())) == 2

    def test_failure_records_nothing(self, definitions_file, tmp_path):
        body = oas.object(
            {
                "ok": oas.ref(file=str(definitions_file), path="/definitions/Part"),
                "bad": oas.ref(file=str(tmp_path / "missing.json"), path="/x"),
            }
        )
        ctx = BuildContext()

        with pytest.raises(ResolutionError):
            resolve_external_files([_route_with(body)], tmp_path, ctx)

        assert ctx.resolved_files == {}


class TestDereference:
    """Tests for dereference."""

    def test_internal_references_replaced(self, tmp_path):
        document = {"a": {"$ref": "#/b"}, "b": {"type": "string"}}

        result = dereference(document, tmp_path.as_uri() + "/")

        assert result == {"a": {"type": "string"}, "b": {"type": "string"}}
        assert document["a"] == {"$ref": "#/b"}

    def test_sibling_keys_are_merged(self, tmp_path):
        document = {"a": {"$ref": "#/b", "deprecated": True}, "b": {"summary": "B"}}

        result = dereference(document, tmp_path.as_uri() + "/")

        assert result["a"] == {"summary": "B", "deprecated": True}

    def test_shared_targets_become_independent_copies(self, tmp_path):
        document = {"a": {"$ref": "#/c"}, "b": {"$ref": "#/c"}, "c": {"type": "string"}}

        result = dereference(document, tmp_path.as_uri() + "/")
        result["a"]["type"] = "number"

        assert result["b"] == {"type": "string"}

    def test_unresolvable_reference(self, tmp_path):
        with pytest.raises(ResolutionError):
            dereference({"a": {"$ref": "#/missing"}}, tmp_path.as_uri() + "/")


class TestBundle:
    """Tests for bundle."""

    def test_external_inlined_internal_kept(self, definitions_file, tmp_path):
        document = {
            "components": {"schemas": {"User": {"type": "object"}}},
            "user": {"$ref": "#/components/schemas/User"},
            "part": {"$ref": f"{definitions_file}#/definitions/Part"},
        }

        result = bundle(document, tmp_path.as_uri() + "/")

        assert result["user"] == {"$ref": "#/components/schemas/User"}
        assert result["part"] == {"type": "string"}
        assert document["part"] == {"$ref": f"{definitions_file}#/definitions/Part"}

    def test_document_without_external_refs_unchanged(self, tmp_path):
        document = {"user": {"$ref": "#/components/schemas/User"}}

        assert bundle(document, tmp_path.as_uri() + "/") == document
