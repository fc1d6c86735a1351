"""
Tests for the project metadata in pyproject.toml.
"""

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def project():
    with open(ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)["project"]


class TestProjectMetadata:
    """Package metadata points at real, user-facing files."""

    def test_no_internal_readme(self, project):
        """The long description is not taken from requirements documents."""
        readme = project.get("readme")
        if readme is not None:
            assert readme not in ("spec.md", "SPEC_FULL.md", "DESIGN.md")
            assert (ROOT / readme).is_file()

    def test_runtime_stack_declared(self, project):
        """Every runtime library the package imports is a dependency."""
        names = {d.split(">")[0].split("=")[0].strip() for d in project["dependencies"]}
        assert names >= {"numpy", "pandas", "fastapi", "pydantic", "uvicorn", "python-dotenv", "rich"}

    def test_console_script(self, project):
        """The wyckoff command points at the CLI entry point."""
        assert project["scripts"]["wyckoff"] == "wyckoff_cli:main"
