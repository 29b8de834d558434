"""End-to-end tests for openapi2http."""

import subprocess
import sys
from pathlib import Path

import pytest

from openapi2http import __version__

FIXTURES = Path(__file__).parent / "fixtures"


def run_module(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "openapi2http", *args],
        capture_output=True,
        text=True,
    )


class TestCLIEndToEnd:
    """End-to-end tests for the openapi2http command."""

    def test_generate_from_file(self, tmp_path):
        """Can generate a .http file from a local spec."""
        output = tmp_path / "petstore.http"

        result = run_module(
            "generate",
            str(FIXTURES / "petstore.yaml"),
            "--tag", "pet",
            "--output", str(output),
        )

        assert result.returncode == 0
        assert output.exists()
        assert output.read_text(encoding="utf-8").count("###\n") == 6

    def test_generate_to_stdout(self):
        """Writes requests to stdout by default."""
        result = run_module("generate", str(FIXTURES / "tree.json"), "--operation-id", "createNode")

        assert result.returncode == 0
        assert result.stdout.startswith("###\n# @name createNode\n# Create a node\n\nPOST {{hostname}}/nodes\n")

    def test_list(self):
        """Lists operations."""
        result = run_module("list", str(FIXTURES / "tree.json"))

        assert result.returncode == 0
        assert "createNode" in result.stdout

    @pytest.mark.integration
    def test_generate_from_url(self):
        """Can generate from a spec served over HTTP."""
        result = run_module(
            "generate",
            "https://petstore3.swagger.io/api/v3/openapi.json",
            "--operation-id", "getPetById",
        )

        assert result.returncode == 0
        assert "# @name getPetById" in result.stdout

    def test_help_command(self):
        """openapi2http --help works."""
        result = run_module("--help")

        assert result.returncode == 0
        assert "generate" in result.stdout.lower()
        assert "list" in result.stdout.lower()

    def test_version_command(self):
        """openapi2http --version works."""
        result = run_module("--version")

        assert result.returncode == 0
        assert __version__ in result.stdout
