"""Entry point: python -m signalsalvage.mcp [save_directory]"""

from __future__ import annotations

import logging
import sys


def main() -> None:
    # stdout carries the MCP protocol.
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)

    from signalsalvage.catalog import default_definition
    from signalsalvage.mcp.server import create_server
    from signalsalvage.persistence import FileStorage, MemoryStorage, SaveManager
    from signalsalvage.runtime import GameRuntime

    definition = default_definition()
    if len(sys.argv) > 1:
        storage = FileStorage(sys.argv[1])
    else:
        storage = MemoryStorage()
    runtime = GameRuntime(definition, SaveManager(storage, definition))
    runtime.load_saved()

    server = create_server(runtime=runtime)
    try:
        server.run(transport="stdio")
    finally:
        runtime.save()


if __name__ == "__main__":
    main()
