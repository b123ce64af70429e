"""Module entrypoint for ``python -m page_order``."""

from __future__ import annotations

from page_order.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
