# LoopBack Bluemix Helper
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint behind the ``loopback-bluemix-mcp`` console command.

It creates a FastMCP server, registers the Bluemix tools and runs the
built-in stdio transport.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from ..tools import register_all_tools


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    mcp = FastMCP("loopback-bluemix")

    register_all_tools(mcp)

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
