"""
Container Versions - version pin checking and updating for dev containers.

Core Modules:
- Discovery: Tool registry and version pin extraction
- Checking: Cached upstream collectors, per-tool checkers, classification
- Reporting: Table and JSON reports with exit status
- Updating: Targeted pin rewrites, git commits and patch releases
"""

__version__ = "1.0.0"
__author__ = "Container Versions Contributors"

# Version info for backward compatibility
VERSION = __version__

# Discovery
from .catalog import (
    ToolDefinition,
    TOOL_DEFINITIONS,
    register_tool,
    unregister_tool,
    get_tool,
    all_tools,
    discover_pins,
)
from .pins import PinSpec, extract_version_from_line
from .tools import ToolRecord, find_record

# Checking
from .collectors import Fetcher, NetworkError, http_get
from .http_cache import ResponseCache, get_cache_dir
from .versions import classify, validate_version, bump_version, max_version
from .check import build_fetcher, check_tools, run_check

# Reporting
from .report import ReportError, build_report, summarize, load_report, report_records
from .render import render_table, print_summary

# Updating
from .updaters import Substitution, Updater, UpdateSkipped
from .update import (
    UpdateRecord,
    UpdateResult,
    UpdateSummary,
    apply_update,
    apply_updates,
    commit_updates,
    outdated_updates,
)
from .git import GitError
from .release import ReleaseError, bump_project_version

# Foundation
from .config import Config, ConfigError, ToolConfig, Preferences, UpdatePreferences, load_config, validate_config

# Logging configuration
from .logging_config import (
    setup_logging,
    get_logger,
)

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Discovery
    "ToolDefinition",
    "TOOL_DEFINITIONS",
    "register_tool",
    "unregister_tool",
    "get_tool",
    "all_tools",
    "discover_pins",
    "PinSpec",
    "extract_version_from_line",
    "ToolRecord",
    "find_record",
    # Checking
    "Fetcher",
    "NetworkError",
    "http_get",
    "ResponseCache",
    "get_cache_dir",
    "classify",
    "validate_version",
    "bump_version",
    "max_version",
    "build_fetcher",
    "check_tools",
    "run_check",
    # Reporting
    "ReportError",
    "build_report",
    "summarize",
    "load_report",
    "report_records",
    "render_table",
    "print_summary",
    # Updating
    "Substitution",
    "Updater",
    "UpdateSkipped",
    "UpdateRecord",
    "UpdateResult",
    "UpdateSummary",
    "apply_update",
    "apply_updates",
    "commit_updates",
    "outdated_updates",
    "GitError",
    "ReleaseError",
    "bump_project_version",
    # Foundation
    "Config",
    "ConfigError",
    "ToolConfig",
    "Preferences",
    "UpdatePreferences",
    "load_config",
    "validate_config",
    # Logging
    "setup_logging",
    "get_logger",
]
