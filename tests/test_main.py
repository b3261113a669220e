"""Tests for the main CLI module."""

import json
import uuid

import pytest
import yaml
from typer.testing import CliRunner

from oasbuilder.config import CONFIG_FILENAME
from oasbuilder.main import app, load_params
from oasbuilder.models import DocumentParams

runner = CliRunner()

DOCUMENT_MODULE = '''
from oasbuilder.models import DocumentParams
from oasbuilder.routes import DefinedRoute, RouteResponse
from oasbuilder.schema import builders as oas

USER = oas.object({"id": oas.string().required()}).label("User")

ROUTE = DefinedRoute(
    operation_id="getUser",
    description="Get a user",
    method="GET",
    path="/users/{id}",
    success_response=RouteResponse(status_code=200, description="OK", schema=USER),
)

PARAMS = DocumentParams(info={"title": "Users", "version": "1.0.0"}, routes=[ROUTE])


def make_params():
    return PARAMS


CONFLICTING = DocumentParams(
    info={"title": "Users", "version": "1.0.0"},
    routes=[
        ROUTE,
        DefinedRoute(
            operation_id="listUsers",
            description="List users",
            method="GET",
            path="/users",
            success_response=RouteResponse(
                status_code=200,
                description="OK",
                schema=oas.array().items(oas.string()).label("User"),
            ),
        ),
    ],
)

NOT_PARAMS = {"info": "nope"}
'''


@pytest.fixture
def document_module(tmp_path, monkeypatch) -> str:
    """Write an importable module defining document parameters, return its name."""
    name = f"api_{uuid.uuid4().hex[:8]}"
    (tmp_path / f"{name}.py").write_text(DOCUMENT_MODULE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestLoadParams:
    """Test the load_params function."""

    def test_loads_instance(self, document_module):
        assert isinstance(load_params(f"{document_module}:PARAMS"), DocumentParams)

    def test_calls_factory(self, document_module):
        params = load_params(f"{document_module}:make_params")

        assert params.info.title == "Users"

    def test_missing_colon(self, document_module):
        with pytest.raises(ValueError):
            load_params(document_module)

    def test_missing_attribute(self, document_module):
        with pytest.raises(ValueError, match="no attribute"):
            load_params(f"{document_module}:MISSING")

    def test_wrong_type(self, document_module):
        with pytest.raises(ValueError, match="not a DocumentParams"):
            load_params(f"{document_module}:NOT_PARAMS")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            load_params("no_such_module_for_oasbuilder:PARAMS")


class TestBuildCommand:
    """Test the CLI command."""

    def test_writes_output_file(self, document_module, tmp_path):
        target = tmp_path / "out" / "openapi.json"

        result = runner.invoke(
            app,
            [f"{document_module}:PARAMS", "--output", str(target), "--config-dir", str(tmp_path)],
        )

        assert result.exit_code == 0
        document = json.loads(target.read_text(encoding="utf-8"))
        assert document["paths"]["/users/{id}"]["get"]["operationId"] == "getUser"
        assert "components" not in document

    def test_representation_option(self, document_module, tmp_path):
        target = tmp_path / "openapi.json"

        result = runner.invoke(
            app,
            [
                f"{document_module}:PARAMS",
                "-r",
                "referenced",
                "-o",
                str(target),
                "--config-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 0
        document = json.loads(target.read_text(encoding="utf-8"))
        assert "User" in document["components"]["schemas"]

    def test_config_file_defaults(self, document_module, tmp_path):
        """Test that .oasbuilder.yaml supplies representation and output file."""
        target = tmp_path / "configured.json"
        (tmp_path / CONFIG_FILENAME).write_text(
            yaml.safe_dump({"representation": "referenced", "output_file": str(target)})
        )

        result = runner.invoke(app, [f"{document_module}:PARAMS", "--config-dir", str(tmp_path)])

        assert result.exit_code == 0
        document = json.loads(target.read_text(encoding="utf-8"))
        assert document["components"]["schemas"]["User"]["required"] == ["id"]

    def test_bad_target_exits_with_error(self, tmp_path):
        result = runner.invoke(
            app, ["no_such_module_for_oasbuilder:PARAMS", "--config-dir", str(tmp_path)]
        )

        assert result.exit_code == 1

    def test_duplicate_label_exits_with_error(self, document_module, tmp_path):
        target = tmp_path / "openapi.json"

        result = runner.invoke(
            app,
            [
                f"{document_module}:CONFLICTING",
                "-r",
                "referenced",
                "-o",
                str(target),
                "--config-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert not target.exists()
