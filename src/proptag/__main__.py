"""Module entrypoint for ``python -m proptag``."""

from __future__ import annotations

from proptag.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
