"""
Directory server example

Serves the files next to this script, one request per connection.
`GET /` answers with text.html, which is created here if missing.

Run:
  uv run python examples/serve_directory.py

Then try:
  curl -i http://127.0.0.1:8080/
  curl -i http://127.0.0.1:8080/missing.html
"""

from __future__ import annotations

import logging
from pathlib import Path

import anyio

from simplewebserver import ServerConfig, WebServer


HERE = Path(__file__).resolve().parent

PAGE = """<html><head><title>simplewebserver</title></head>
<body>
<h1>Hello from <cs371server></h1>
<p>Served on <cs371date></p>
</body></html>
"""


async def main() -> None:
    index = HERE / "text.html"
    if not index.exists():
        index.write_text(PAGE)

    config = ServerConfig(root=HERE, port=8080)
    async with anyio.create_task_group() as tg:
        port = await tg.start(WebServer(config).serve)
        print(f"Listening on http://127.0.0.1:{port}")
        print("Press Ctrl-C to stop.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    anyio.run(main)
