"""
Tool registry: where each tool is pinned, how its latest version is found,
and how its pin is rewritten.

New tools are added by registering a ``ToolDefinition``; the check and update
pipelines only ever look tools up by name.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import checkers
from .checkers import Checker
from .collectors import Fetcher
from .pins import KIND_DOCKERFILE_ARG, KIND_SHELL_VAR, KIND_WORKFLOW_ACTION, PinSpec
from .tools import ToolRecord
from .updaters import Substitution, Updater, default_expansion, dockerfile_arg, noop, shell_var, workflow_action

logger = logging.getLogger(__name__)

FEATURES = "lib/features"
BASE = "lib/base"
CI_WORKFLOW = ".github/workflows/ci.yml"


@dataclass(frozen=True)
class ToolDefinition:
    """Everything the pipeline knows about one tool."""

    name: str
    pin: PinSpec
    checker: Checker
    updater: Updater

    @property
    def source_file(self) -> str:
        """File name shown in reports (basename of the pin file)."""
        return os.path.basename(self.pin.path)

    def discover(self, project_root: Path) -> ToolRecord | None:
        """Create a record if the tool is pinned in the project tree."""
        current = self.pin.read(project_root)
        if not current:
            return None
        return ToolRecord(name=self.name, current_version=current, source_file=self.source_file)

    def fetch_latest(self, fetcher: Fetcher, current: str) -> str:
        """Raw latest upstream version ("" when it cannot be determined)."""
        return self.checker(fetcher, current)

    def apply_update(self, project_root: Path, version: str, dry_run: bool = False) -> list[Path]:
        """Rewrite this tool's pin; see ``Updater.apply``."""
        return self.updater.apply(project_root, version, dry_run=dry_run)


def _docker_arg(name: str, arg: str, checker: Checker, *extra: Substitution, ignore: tuple[str, ...] = ()) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        pin=PinSpec(KIND_DOCKERFILE_ARG, "Dockerfile", arg, ignore=ignore),
        checker=checker,
        updater=dockerfile_arg(arg, *extra),
    )


def _script_var(
    name: str,
    path: str,
    var: str,
    checker: Checker,
    *extra: Substitution,
    anchored: bool = True,
    plain_anchored: bool = True,
) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        pin=PinSpec(KIND_SHELL_VAR, path, var, anchored=anchored),
        checker=checker,
        updater=shell_var(path, var, *extra, plain_anchored=plain_anchored),
    )


gh = checkers.github_release

_DEV_TOOLS = f"{FEATURES}/dev-tools.sh"
_DOCKER = f"{FEATURES}/docker.sh"
_KOTLIN_DEV = f"{FEATURES}/kotlin-dev.sh"
_JAVA_DEV = f"{FEATURES}/java-dev.sh"
_PYTHON = f"{FEATURES}/python.sh"
_SETUP = f"{BASE}/setup.sh"

# Discovery order; reports list tools in this order.
TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    # Languages (Dockerfile)
    _docker_arg("Python", "PYTHON_VERSION", checkers.check_python),
    _docker_arg("Node.js", "NODE_VERSION", checkers.check_nodejs),
    _docker_arg("Go", "GO_VERSION", checkers.check_go),
    _docker_arg("Rust", "RUST_VERSION", checkers.check_rust),
    _docker_arg(
        "Ruby", "RUBY_VERSION", checkers.check_ruby,
        default_expansion(f"{FEATURES}/ruby.sh", "RUBY_VERSION", optional=True),
    ),
    _docker_arg("Java", "JAVA_VERSION", checkers.check_java),
    _docker_arg("R", "R_VERSION", checkers.check_r),
    _docker_arg("Kotlin", "KOTLIN_VERSION", gh("JetBrains/kotlin")),
    _docker_arg("android-cmdline-tools", "ANDROID_CMDLINE_TOOLS_VERSION", checkers.check_android_cmdline_tools),
    _docker_arg("android-ndk", "ANDROID_NDK_VERSION", checkers.check_android_ndk),
    # Kubernetes tools (Dockerfile)
    _docker_arg("kubectl", "KUBECTL_VERSION", checkers.check_kubectl),
    _docker_arg("k9s", "K9S_VERSION", gh("derailed/k9s")),
    _docker_arg("krew", "KREW_VERSION", gh("kubernetes-sigs/krew")),
    _docker_arg("Helm", "HELM_VERSION", gh("helm/helm"), ignore=("latest",)),
    # Terraform tools (Dockerfile)
    _docker_arg("Terragrunt", "TERRAGRUNT_VERSION", gh("gruntwork-io/terragrunt")),
    _docker_arg("terraform-docs", "TFDOCS_VERSION", gh("terraform-docs/terraform-docs")),
    _docker_arg("tflint", "TFLINT_VERSION", gh("terraform-linters/tflint")),
    ToolDefinition(
        name="Trivy",
        pin=PinSpec(KIND_SHELL_VAR, f"{FEATURES}/terraform.sh", "TRIVY_VERSION"),
        checker=gh("aquasecurity/trivy"),
        updater=noop("installed via APT"),
    ),
    _docker_arg("pixi", "PIXI_VERSION", gh("prefix-dev/pixi")),
    # Python tools
    _script_var("Poetry", _PYTHON, "POETRY_VERSION", gh("python-poetry/poetry"), anchored=False),
    _script_var("uv", _PYTHON, "UV_VERSION", gh("astral-sh/uv"), anchored=False),
    # Dev tools
    _script_var("lazygit", _DEV_TOOLS, "LAZYGIT_VERSION", gh("jesseduffield/lazygit")),
    _script_var("direnv", _DEV_TOOLS, "DIRENV_VERSION", gh("direnv/direnv")),
    _script_var("act", _DEV_TOOLS, "ACT_VERSION", gh("nektos/act")),
    _script_var("delta", _DEV_TOOLS, "DELTA_VERSION", gh("dandavison/delta")),
    _script_var("glab", _DEV_TOOLS, "GLAB_VERSION", checkers.gitlab_release("gitlab-org%2Fcli")),
    _script_var("mkcert", _DEV_TOOLS, "MKCERT_VERSION", gh("FiloSottile/mkcert")),
    _script_var("duf", _DEV_TOOLS, "DUF_VERSION", gh("muesli/duf")),
    _script_var("entr", _DEV_TOOLS, "ENTR_VERSION", checkers.check_entr),
    _script_var(
        "biome", _DEV_TOOLS, "BIOME_VERSION", checkers.check_biome,
        Substitution(
            "biome.json",
            r"biomejs\.dev/schemas/[0-9][0-9.]*/schema\.json",
            "biomejs.dev/schemas/{version}/schema.json",
            optional=True,
        ),
    ),
    _script_var("taplo", _DEV_TOOLS, "TAPLO_VERSION", gh("tamasfe/taplo", strip_v=False)),
    # Docker tools
    _script_var("dive", _DOCKER, "DIVE_VERSION", gh("wagoodman/dive")),
    _script_var("lazydocker", _DOCKER, "LAZYDOCKER_VERSION", gh("jesseduffield/lazydocker")),
    # Kotlin dev tools
    _script_var("ktlint", _KOTLIN_DEV, "KTLINT_VERSION", gh("pinterest/ktlint")),
    _script_var("detekt", _KOTLIN_DEV, "DETEKT_VERSION", gh("detekt/detekt")),
    _script_var("kotlin-language-server", _KOTLIN_DEV, "KLS_VERSION", gh("fwcd/kotlin-language-server")),
    # Java dev tools
    _script_var("jdtls", f"{FEATURES}/lib/install-jdtls.sh", "JDTLS_VERSION", checkers.check_jdtls),
    _script_var("spring-boot-cli", _JAVA_DEV, "SPRING_VERSION", gh("spring-projects/spring-boot")),
    _script_var("jbang", _JAVA_DEV, "JBANG_VERSION", gh("jbangdev/jbang")),
    _script_var("mvnd", _JAVA_DEV, "MVND_VERSION", gh("apache/maven-mvnd"), anchored=False, plain_anchored=False),
    _script_var("google-java-format", _JAVA_DEV, "GJF_VERSION", gh("google/google-java-format")),
    _script_var("jmh", _JAVA_DEV, "JMH_VERSION", checkers.maven_central("org.openjdk.jmh", "jmh-core")),
    # Base system tools
    _script_var("zoxide", _SETUP, "ZOXIDE_VERSION", gh("ajeetdsouza/zoxide")),
    _script_var("cosign", _SETUP, "COSIGN_VERSION", gh("sigstore/cosign")),
    # GitHub Actions
    ToolDefinition(
        name="trivy-action",
        pin=PinSpec(KIND_WORKFLOW_ACTION, CI_WORKFLOW, "aquasecurity/trivy-action", ignore=("master",)),
        checker=gh("aquasecurity/trivy-action"),
        updater=workflow_action(CI_WORKFLOW, "aquasecurity/trivy-action"),
    ),
)

_REGISTRY: dict[str, ToolDefinition] = {t.name: t for t in TOOL_DEFINITIONS}


def register_tool(definition: ToolDefinition, replace: bool = False) -> None:
    """Add a tool to the registry.

    Raises:
        ValueError: If a tool with the same name exists and replace is False
    """
    if definition.name in _REGISTRY and not replace:
        raise ValueError(f"Tool already registered: {definition.name}")
    _REGISTRY[definition.name] = definition


def unregister_tool(name: str) -> None:
    """Remove a tool from the registry (no-op if absent)."""
    _REGISTRY.pop(name, None)


def get_tool(name: str) -> ToolDefinition | None:
    """Get a tool definition by name."""
    return _REGISTRY.get(name)


def all_tools() -> list[ToolDefinition]:
    """All registered tools in discovery order."""
    return list(_REGISTRY.values())


def discover_pins(project_root: Path, skip: set[str] | frozenset[str] = frozenset()) -> list[ToolRecord]:
    """Scan the project tree for version pins.

    Args:
        project_root: Project root directory
        skip: Tool names to leave out

    Returns:
        One unchecked record per pinned tool, in registry order
    """
    records: list[ToolRecord] = []
    for definition in all_tools():
        if definition.name in skip:
            logger.debug(f"Skipping {definition.name} (disabled in config)")
            continue
        record = definition.discover(project_root)
        if record is not None:
            records.append(record)
    return records
