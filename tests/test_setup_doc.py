"""Tests for setup guide rendering."""

from reusable_workflows.setup_doc import (
    PERMISSIONS_HEADING,
    SECRET_MASK,
    SECRETS_HEADING,
    extract_section,
    render_setup_doc,
)


DOCS = """\
# Tool

## Inputs

- `region`: where to deploy

## Permissions

- `contents: read`

## Usage

Call it.
"""


class TestExtractSection:
    def test_first_matching_section(self):
        assert extract_section(DOCS, SECRETS_HEADING) == "- `region`: where to deploy"
        assert extract_section(DOCS, PERMISSIONS_HEADING) == "- `contents: read`"

    def test_missing_section(self):
        assert extract_section("# Tool\n\nNothing here.\n", PERMISSIONS_HEADING) == ""


class TestRenderSetupDoc:
    def test_sections(self, docker_ops):
        doc = render_setup_doc(
            docker_ops,
            {"image_name": "app", "docker_token": "hunter2"},
            ["docker-hub"],
            ".github/workflows/docker-ops.yml",
        )

        assert doc.startswith("# Setup Guide: Docker Ops\n")
        assert "## 1. Workflow File" in doc
        assert "## 2. Configuration Summary" in doc
        assert "## 3. Selected Components" in doc
        assert "- Docker Hub" in doc
        assert "## 4. GitHub Secrets & Variables" in doc
        assert "- `docker_token`: Docker Hub access token" in doc
        assert "## 5. Permissions" in doc
        assert "- `id-token: write`" in doc
        assert "## 6. Complete Documentation" in doc
        assert "[`docs/docker-ops.md`](docs/docker-ops.md)" in doc

    def test_secret_values_masked(self, docker_ops):
        doc = render_setup_doc(docker_ops, {"image_name": "app", "docker_token": "hunter2"})

        assert "hunter2" not in doc
        assert f"- **docker_token**: `{SECRET_MASK}`" in doc
        assert "- **image_name**: `app`" in doc

    def test_without_groups_or_doc_sections(self, catalog):
        npm = catalog.get("npm-release")
        doc = render_setup_doc(npm, {"npm_token": "t"})

        assert "Selected Components" not in doc
        assert "## 3. GitHub Secrets & Variables" in doc
        assert "See documentation for required secrets and variables." in doc
        assert "See documentation for required permissions." in doc
        assert ".github/workflows/npm-release.yml" in doc
