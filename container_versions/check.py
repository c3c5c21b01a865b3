"""
The check pipeline: discover pins, fetch upstream versions, classify.

Tools are checked one at a time in discovery order; every fetch blocks.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from .catalog import discover_pins, get_tool
from .collectors import Fetcher
from .config import Config
from .http_cache import ResponseCache, get_cache_dir
from .tools import ToolRecord

logger = logging.getLogger(__name__)


def build_fetcher(
    config: Config,
    use_cache: bool | None = None,
    cache_duration: int | None = None,
    timeout: int | None = None,
    cache_dir: Path | None = None,
) -> Fetcher:
    """Create the run's fetcher; explicit arguments override configuration."""
    prefs = config.preferences
    cache = ResponseCache(
        directory=cache_dir or get_cache_dir(),
        ttl=prefs.cache_duration if cache_duration is None else cache_duration,
        enabled=prefs.use_cache if use_cache is None else use_cache,
    )
    return Fetcher(cache, timeout=prefs.timeout_seconds if timeout is None else timeout)


def check_tools(
    records: list[ToolRecord],
    fetcher: Fetcher,
    manual: frozenset[str] = frozenset(),
    progress: TextIO | None = None,
) -> list[ToolRecord]:
    """Resolve the latest version of every record in place.

    Args:
        records: Unchecked records from discovery
        fetcher: Fetcher to use
        manual: Tool names to flag for manual checking without fetching
        progress: Optional stream for "  Tool... ✓" progress lines

    A checker that raises marks its record as an error; the rest still run.

    Returns:
        The same list, with latest_version and status set
    """
    for record in records:
        if record.name in manual:
            record.mark_manual()
            continue

        definition = get_tool(record.name)
        if definition is None:
            if progress is not None:
                print(f"  Skipping {record.name} (no checker)", file=progress)
            continue

        if progress is not None:
            print(f"  {record.name}...", end="", file=progress, flush=True)

        try:
            latest = definition.fetch_latest(fetcher, record.current_version)
        except Exception as e:
            logger.debug(f"{record.name}: checker failed: {e}", exc_info=True)
            latest = ""
        status = record.set_latest(latest)
        logger.debug(f"{record.name}: {record.current_version} vs {record.latest_version} -> {status}")

        if progress is not None:
            print(" ✓", file=progress, flush=True)

    return records


def run_check(
    project_root: Path,
    config: Config,
    fetcher: Fetcher,
    progress: TextIO | None = None,
) -> list[ToolRecord]:
    """Discover and check all version pins under project_root."""
    records = discover_pins(project_root, skip=config.skipped_tools)
    logger.debug(f"Discovered {len(records)} version pin(s) in {project_root}")
    if not records:
        return records
    if progress is not None:
        print("Checking for latest versions...", file=progress)
    return check_tools(records, fetcher, manual=config.manual_tools, progress=progress)
