"""Tests for the openapi2http command line."""

import json
from pathlib import Path

from click.testing import CliRunner

from openapi2http.cli import main

FIXTURES = Path(__file__).parent / "fixtures"
PETSTORE = str(FIXTURES / "petstore.yaml")


class TestListCommand:
    """Tests for `openapi2http list`."""

    def test_lists_operations(self):
        """Prints the operations table."""
        result = CliRunner().invoke(main, ["list", PETSTORE], env={"COLUMNS": "200"})

        assert result.exit_code == 0
        assert "addPet" in result.stdout
        assert "/pet/{petId}" in result.stdout

    def test_missing_spec(self, tmp_path):
        """Reports load errors and exits 1."""
        result = CliRunner().invoke(main, ["list", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Error:" in result.stderr


class TestGenerateCommand:
    """Tests for `openapi2http generate`."""

    def test_by_operation_id(self):
        """Renders a single operation to stdout."""
        result = CliRunner().invoke(main, ["generate", PETSTORE, "--operation-id", "getPetById"])

        assert result.exit_code == 0
        assert result.stdout == (
            "###\n"
            "# @name getPetById\n"
            "# Find pet by ID\n"
            "\n"
            "GET http://petstore.swagger.io/v2/pet/1\n"
            "api_key: {{api_key}}\n"
        )
        assert "Parsed: OpenAPI Petstore v1.0.0" in result.stderr
        assert "Found 1 operations" in result.stderr

    def test_by_path_renders_in_order(self):
        """Multiple matches are separated by a blank line."""
        result = CliRunner().invoke(main, ["generate", PETSTORE, "--path", "/pet"])

        assert result.exit_code == 0
        assert result.stdout.count("###\n") == 2
        assert result.stdout.index("# @name addPet") < result.stdout.index("# @name updatePet")
        assert "}\n\n###\n" in result.stdout

    def test_by_tag(self):
        """Tag filters select matching operations."""
        result = CliRunner().invoke(main, ["generate", PETSTORE, "--tag", "user"])

        assert result.exit_code == 0
        assert "# @name loginUser" in result.stdout
        assert "# @name getUserByName" in result.stdout
        assert "# @name addPet" not in result.stdout

    def test_without_filters_renders_everything(self):
        """All operations are rendered when no filter is given."""
        result = CliRunner().invoke(main, ["generate", PETSTORE])

        assert result.exit_code == 0
        assert result.stdout.count("###\n") == 11

    def test_no_match(self):
        """Reports when nothing matches."""
        result = CliRunner().invoke(main, ["generate", PETSTORE, "--operation-id", "nope"])

        assert result.exit_code == 1
        assert "No operations found" in result.stderr
        assert result.stdout == ""

    def test_base_url_option(self):
        """--base-url replaces the server URL."""
        result = CliRunner().invoke(
            main,
            ["generate", PETSTORE, "--operation-id", "getPetById", "--base-url", "http://localhost:8080"],
        )

        assert "GET http://localhost:8080/pet/1\n" in result.stdout

    def test_base_url_from_environment(self):
        """The base URL can come from OPENAPI2HTTP_BASE_URL."""
        result = CliRunner().invoke(
            main,
            ["generate", PETSTORE, "--operation-id", "getPetById"],
            env={"OPENAPI2HTTP_BASE_URL": "http://localhost:9000"},
        )

        assert "GET http://localhost:9000/pet/1\n" in result.stdout

    def test_output_file(self, tmp_path):
        """Writes to a file with --output."""
        output = tmp_path / "petstore.http"

        result = CliRunner().invoke(
            main, ["generate", PETSTORE, "--operation-id", "placeOrder", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert result.stdout == ""
        content = output.read_text(encoding="utf-8")
        assert content.startswith("###\n# @name placeOrder\n")
        body = json.loads(content.split("\n\n", 2)[2])
        assert body["shipDate"] == "2024-01-01T00:00:00Z"

    def test_invalid_spec(self):
        """Validation failures exit 1 with an error."""
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "invalid.yaml")])

        assert result.exit_code == 1
        assert "spec validation failed" in result.stderr

    def test_plain_yaml_scalars(self):
        """Unquoted response codes and dates render without errors."""
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "events.yaml")])

        assert result.exit_code == 0
        assert result.stdout.count("###\n") == 2
        assert '"day": "2024-05-01"' in result.stdout
        assert "Error" not in result.stderr

    def test_render_failure_continues(self, tmp_path):
        """A failing operation is reported and the others are still written."""
        spec = tmp_path / "nan.json"
        spec.write_text(json.dumps({
            "openapi": "3.0.3",
            "info": {"title": "NaN", "version": "1"},
            "paths": {
                "/a": {"get": {"operationId": "a", "responses": {"200": {"description": "ok"}}}},
                "/bad": {
                    "post": {
                        "operationId": "bad",
                        "requestBody": {
                            "content": {"application/json": {"schema": {"type": "number", "default": 1}}}
                        },
                        "responses": {"200": {"description": "ok"}},
                    }
                },
            },
        }).replace('"default": 1', '"default": NaN'))

        result = CliRunner().invoke(main, ["generate", str(spec)])

        assert result.exit_code == 1
        assert "# @name a" in result.stdout
        assert "# @name bad" not in result.stdout
        assert "Error generating request: POST /bad" in result.stderr

    def test_verbose_flag(self):
        """--verbose is accepted before the command."""
        result = CliRunner().invoke(main, ["--verbose", "generate", PETSTORE, "--operation-id", "addPet"])

        assert result.exit_code == 0
        assert "# @name addPet" in result.stdout
