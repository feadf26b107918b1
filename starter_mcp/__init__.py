"""
Starter MCP server package.

This package exposes MCP tools over a single HTTP endpoint:
- `sum`: add two numbers
- `consult_package_json`: return the contents of ./package.json

The implementation covers:
- Configuration loading
- Tool registry and per-tool argument models
- JSON-RPC dispatch of MCP methods
- FastAPI transport binding
"""
