"""
Shared fixtures: a miniature dev-container project tree with version pins.
"""

from pathlib import Path

import pytest


PROJECT_FILES = {
    "VERSION": "4.3.1\n",
    "Dockerfile": """\
# Dev container image
# Version: 4.3.1
FROM debian:trixie-slim

ARG PYTHON_VERSION=3.13.7
ARG NODE_VERSION=22
ARG RUBY_VERSION=3.4.4
ARG KUBECTL_VERSION=1.33.3
ARG K9S_VERSION=0.50.9
ARG HELM_VERSION=latest
""",
    "lib/features/ruby.sh": """\
#!/bin/bash
RUBY_VERSION="${RUBY_VERSION:-3.4.4}"
""",
    "lib/features/dev-tools.sh": """\
#!/bin/bash
LAZYGIT_VERSION="0.54.0"
DIRENV_VERSION="${DIRENV_VERSION:-2.37.1}"
BIOME_VERSION="2.1.0"
""",
    "lib/features/python.sh": """\
#!/bin/bash
install_uv() {
    UV_VERSION="${UV_VERSION:-0.8.4}"
}
""",
    "lib/features/java-dev.sh": """\
#!/bin/bash
install_mvnd() {
    MVND_VERSION="1.0.2"
    MVND_URL="https://github.com/apache/maven-mvnd/releases/download/${MVND_VERSION}/mvnd.tar.gz"
}
""",
    "lib/features/terraform.sh": """\
#!/bin/bash
TRIVY_VERSION="0.65.0"
""",
    "biome.json": '{\n  "$schema": "https://biomejs.dev/schemas/2.1.0/schema.json"\n}\n',
    ".github/workflows/ci.yml": """\
jobs:
  scan:
    steps:
      - uses: actions/checkout@v5
      - uses: aquasecurity/trivy-action@0.32.0
""",
    "tests/framework.sh": """\
#!/bin/bash
# Version: 4.3.1
readonly TEST_FRAMEWORK_VERSION="4.3.1"
""",
}

# Tool names discovered in PROJECT_FILES, in registry order
DISCOVERED_TOOLS = [
    "Python",
    "Node.js",
    "Ruby",
    "kubectl",
    "k9s",
    "Trivy",
    "uv",
    "lazygit",
    "direnv",
    "biome",
    "mvnd",
    "trivy-action",
]


def write_project(root: Path) -> Path:
    for rel_path, content in PROJECT_FILES.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def project_root(tmp_path):
    """A project tree with a handful of pins of every kind."""
    return write_project(tmp_path / "project")
