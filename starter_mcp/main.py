from __future__ import annotations

import logging
from typing import Optional

import anyio

from .config import Settings, get_settings
from .tools import ToolRegistry
from .tools import math_tools, package_tools


def create_registry(settings: Optional[Settings] = None) -> ToolRegistry:
    """
    Build the tool registry with every tool this server exposes, then freeze it.
    """
    settings = settings or get_settings()

    registry = ToolRegistry()

    # Register tool groups
    math_tools.register_tools(registry)
    package_tools.register_tools(registry, package_json_path=settings.package_json_path)

    return registry.freeze()


def main() -> None:
    """
    Entrypoint for running the MCP server over HTTP.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from .http_server import run_http_server

    anyio.run(run_http_server, settings)


if __name__ == "__main__":
    main()
