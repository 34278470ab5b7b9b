"""Entry point for the n8n-mcp MCP server.

Runs the server over stdio via ``python -m n8n_mcp`` or the ``n8n-mcp``
console script.
"""


def main() -> None:
    """Entry point for direct execution."""
    from .server import main as server_main

    server_main()


if __name__ == "__main__":
    main()
