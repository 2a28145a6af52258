"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from reusable_workflows.cli import app
from reusable_workflows.yaml_io import load_yaml


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, catalog_root):
    """Invoke the app against the test catalog."""

    def _invoke(*args, input=None):
        return runner.invoke(app, ["--catalog", str(catalog_root), *args], input=input)

    return _invoke


# =============================================================================
# Catalog commands
# =============================================================================


class TestListCommand:
    def test_lists_templates(self, invoke):
        result = invoke("list")

        assert result.exit_code == 0
        assert "docker-ops" in result.output
        assert "npm-release" in result.output

    def test_missing_catalog(self, runner, tmp_path):
        result = runner.invoke(app, ["--catalog", str(tmp_path), "list"])

        assert result.exit_code == 10
        assert "Workflows directory not found" in result.output

    def test_invalid_log_format(self, runner, catalog_root):
        result = runner.invoke(app, ["--catalog", str(catalog_root), "--log-format", "xml", "list"])

        assert result.exit_code == 30
        assert "Invalid log format 'xml'" in result.output
        assert "Available: console, json" in result.output
        assert "Traceback" not in result.output

    def test_json_log_format(self, runner, catalog_root):
        result = runner.invoke(app, ["--catalog", str(catalog_root), "--log-format", "json", "list"])
        assert result.exit_code == 0

    def test_invalid_config_file(self, runner, catalog_root, tmp_path):
        config = tmp_path / "generator.yaml"
        config.write_text("colour: blue\n")

        result = runner.invoke(app, ["--catalog", str(catalog_root), "--config", str(config), "list"])

        assert result.exit_code == 30
        assert "Unknown configuration keys: colour" in result.output


class TestPresetsCommand:
    def test_lists_presets(self, invoke):
        result = invoke("presets", "docker-ops")

        assert result.exit_code == 0
        assert "Docker Hub" in result.output
        assert "GCP Deploy" in result.output

    def test_unknown_template(self, invoke):
        result = invoke("presets", "nope")

        assert result.exit_code == 11
        assert "Template not found: nope" in result.output


class TestDetectCommand:
    def test_nothing_detected(self, invoke, target_dir):
        result = invoke("detect", "docker-ops", "--target", str(target_dir))

        assert result.exit_code == 0
        assert "No existing configuration found for docker-ops" in result.output

    def test_detected_values(self, invoke, target_dir):
        workflows = target_dir / ".github" / "workflows"
        workflows.mkdir(parents=True)
        (workflows / "ci.yml").write_text(
            "jobs:\n"
            "  release:\n"
            "    uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@master\n"
            "    with:\n"
            "      image_name: detected-app\n"
        )

        result = invoke("detect", "docker-ops", "--target", str(target_dir))

        assert result.exit_code == 0
        assert "image_name: detected-app" in result.output


# =============================================================================
# Generate
# =============================================================================


class TestGenerateCommand:
    def test_dry_run_prints_manifest(self, invoke, target_dir):
        result = invoke(
            "generate", "docker-ops", "-n", "--dry-run",
            "-s", "image_name=app", "-r", "v2", "--target", str(target_dir),
        )

        assert result.exit_code == 0
        assert "uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@v2" in result.output
        assert "      image_name: app\n" in result.output
        assert not (target_dir / ".github").exists()

    def test_writes_manifest_and_setup_doc(self, invoke, target_dir):
        result = invoke(
            "generate", "docker-ops", "--non-interactive", "--setup-doc",
            "--preset", "docker hub", "--target", str(target_dir),
        )

        assert result.exit_code == 0
        workflow = target_dir / ".github" / "workflows" / "docker-ops.yml"
        assert workflow.exists()
        assert (target_dir / "SETUP-docker-ops.md").exists()
        assert "✓ Generated: " in result.output
        assert "Next steps" not in result.output

        job = load_yaml(workflow.read_text())["jobs"]["release"]
        assert job["with"]["docker_login"] == "octocat"

    def test_custom_output(self, invoke, target_dir):
        output = target_dir / "out"
        result = invoke(
            "generate", "docker-ops", "-n", "-s", "image_name=app",
            "-o", str(output), "--target", str(target_dir),
        )

        assert result.exit_code == 0
        assert (output / "docker-ops.yml").exists()

    def test_missing_required_value(self, invoke, target_dir):
        result = invoke("generate", "docker-ops", "-n", "--target", str(target_dir))

        assert result.exit_code == 20
        assert "Missing required values: image_name" in result.output

    def test_bad_assignment(self, invoke, target_dir):
        result = invoke("generate", "docker-ops", "-n", "-s", "image_name", "--target", str(target_dir))

        assert result.exit_code == 2
        assert "Invalid assignment" in result.output

    def test_template_required_non_interactive(self, invoke, target_dir):
        result = invoke("generate", "-n", "--target", str(target_dir))
        assert result.exit_code == 2

    def test_interactive(self, invoke, target_dir):
        answers = [
            "0",       # preset: manual setup
            "",        # optional components: none
            "my-app",  # image_name
            "",        # build_platforms (default)
            "",        # push_latest (default yes)
            "",        # docker_token
            "",        # gcp_credentials
            "",        # proceed
        ]
        result = invoke(
            "generate", "docker-ops", "--no-setup-doc", "--target", str(target_dir),
            input="\n".join(answers) + "\n",
        )

        assert result.exit_code == 0, result.output
        assert "Next steps" in result.output

        workflow = target_dir / ".github" / "workflows" / "docker-ops.yml"
        job = load_yaml(workflow.read_text())["jobs"]["release"]
        assert job["with"] == {
            "image_name": "my-app",
            "build_platforms": "linux/amd64",
            "push_latest": True,
        }
        assert "secrets" not in job

    def test_interactive_cancel(self, invoke, target_dir):
        answers = ["0", "", "my-app", "", "", "", "", "n"]
        result = invoke(
            "generate", "docker-ops", "--no-setup-doc", "--target", str(target_dir),
            input="\n".join(answers) + "\n",
        )

        assert result.exit_code == 3
        assert "Generation cancelled" in result.output
        assert not (target_dir / ".github").exists()
