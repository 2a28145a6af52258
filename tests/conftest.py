"""Shared fixtures: a small template catalog on disk."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from reusable_workflows.catalog import TemplateCatalog
from reusable_workflows.config import GeneratorConfig
from reusable_workflows.logging_config import ROOT_LOGGER

DOCKER_OPS_WORKFLOW = """\
name: Docker Ops
on:
  workflow_call:
    inputs:
      image_name:
        description: "Name of the image"
        required: true
        type: string
      build_platforms:
        description: "Target platforms (comma separated)"
        required: false
        default: linux/amd64
        type: string
      push_latest:
        description: "Push the latest tag"
        required: false
        default: true
        type: boolean
      docker_login:
        description: "Docker Hub: Username"
        required: false
        type: string
      docker_repo:
        description: "Docker Hub: Repository (e.g. org/app)"
        required: false
        type: string
      gcp_region:
        description: "GCP: Region"
        required: false
        type: string
    secrets:
      docker_token:
        description: "Docker Hub: Access token"
        required: false
      gcp_credentials:
        description: "GCP: Service account key"
        required: false
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: echo build
"""

DOCKER_OPS_DOCS = """\
# Docker Ops

<!-- short: Build and push Docker images -->

Builds container images and pushes them to one or more registries.

## Secrets

- `docker_token`: Docker Hub access token
- `gcp_credentials`: GCP service account key

## Permissions

- `contents: read`
- `id-token: write`

## Usage

See the examples directory.
"""

DOCKER_OPS_EXAMPLE = """\
name: Docker Ops
on:
  push:
    branches: [main]
  workflow_dispatch:

permissions:
  contents: read
  id-token: write

jobs:
  release:
    uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@master
    with:
      image_name: my-app

# Push the image to Docker Hub
# docker-hub:
#   uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@master
#   with:
#     image_name: my-app
#     docker_login: octocat
#   secrets:
#     docker_token: ${{ secrets.DOCKERHUB_TOKEN }}

# Publish to GCP Artifact Registry
# gcp-deploy:
#   uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@master
#   with:
#     image_name: my-app
#     gcp_region: us-east1
"""

NPM_RELEASE_WORKFLOW = """\
name: NPM Release
on:
  workflow_call:
    inputs:
      package_dir:
        description: "Directory of the package"
        required: false
        default: "."
        type: string
    secrets:
      npm_token:
        description: "Registry token"
        required: true
jobs:
  publish:
    runs-on: ubuntu-latest
    steps:
      - run: npm publish
"""

NPM_RELEASE_DOCS = """\
# NPM Release

Publishes a package to the npm registry whenever a release is tagged on the default branch.
"""

NPM_RELEASE_EXAMPLE = """\
name: NPM Release
on:
  release:
    types: [published]

jobs:
  release:
    uses: udx/reusable-workflows/.github/workflows/npm-release.yml@master
    secrets:
      npm_token: ${{ secrets.NPM_TOKEN }}
"""

NOT_CALLABLE_WORKFLOW = """\
name: Lint
on:
  push:
jobs:
  lint:
    runs-on: ubuntu-latest
    steps:
      - run: echo lint
"""


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def build_catalog(root: Path) -> Path:
    """Write a catalog with two complete templates and a few broken entries."""
    workflows = root / ".github" / "workflows"
    write(workflows / "docker-ops.yml", DOCKER_OPS_WORKFLOW)
    write(root / "docs" / "docker-ops.md", DOCKER_OPS_DOCS)
    write(root / "examples" / "docker-ops.yml", DOCKER_OPS_EXAMPLE)

    write(workflows / "npm-release.yml", NPM_RELEASE_WORKFLOW)
    write(root / "docs" / "npm-release.md", NPM_RELEASE_DOCS)
    write(root / "examples" / "npm-release.yml", NPM_RELEASE_EXAMPLE)

    # Skipped: missing docs, not reusable, private, unparsable
    write(workflows / "no-docs.yml", DOCKER_OPS_WORKFLOW)
    write(root / "examples" / "no-docs.yml", DOCKER_OPS_EXAMPLE)
    write(workflows / "lint.yml", NOT_CALLABLE_WORKFLOW)
    write(root / "docs" / "lint.md", "# Lint\n")
    write(root / "examples" / "lint.yml", "name: Lint\n")
    write(workflows / "_shared.yml", DOCKER_OPS_WORKFLOW)
    write(workflows / "broken.yml", "name: [unclosed\n")
    write(root / "docs" / "broken.md", "# Broken\n")
    write(root / "examples" / "broken.yml", "name: Broken\n")
    return root


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    return build_catalog(tmp_path / "catalog")


@pytest.fixture
def config() -> GeneratorConfig:
    return GeneratorConfig()


@pytest.fixture
def catalog(catalog_root: Path, config: GeneratorConfig) -> TemplateCatalog:
    catalog = TemplateCatalog(catalog_root, config)
    catalog.load()
    return catalog


@pytest.fixture
def docker_ops(catalog: TemplateCatalog):
    return catalog.get("docker-ops")


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    target = tmp_path / "project"
    target.mkdir()
    return target


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by ``configure_logging`` during a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
