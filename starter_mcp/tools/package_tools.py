from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import anyio
from mcp import types

from ..models import ConsultPackageJsonArguments
from . import ToolRegistry, text_result, tool_spec

logger = logging.getLogger(__name__)

PACKAGE_JSON_FALLBACK = "package.json not found. Please provide the package.json file."


def package_tools(package_json_path: Path) -> Dict[str, Any]:
    """
    Factory to produce handlers bound to the configured package.json location.
    """

    async def consult_package_json(
        arguments: ConsultPackageJsonArguments,
    ) -> types.CallToolResult:
        # Relative paths resolve against the cwd of the call, not of startup.
        try:
            text = await anyio.Path(package_json_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", package_json_path, e)
            return text_result(PACKAGE_JSON_FALLBACK)
        return text_result(text)

    return {
        "consult_package_json": {
            "model": ConsultPackageJsonArguments,
            "handler": consult_package_json,
            "description": (
                "Returns the contents of the project's package.json file, "
                "or a notice when the file is not available."
            ),
        },
    }


def register_tools(registry: ToolRegistry, package_json_path: Path) -> None:
    tool_defs = package_tools(package_json_path)
    for name, meta in tool_defs.items():
        registry.add_tool(
            tool_spec(name, meta["description"], meta["model"]),
            meta["model"],
            meta["handler"],
        )
