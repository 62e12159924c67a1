"""Entry point for `python -m k8sintellect`.

Usage:
    python -m k8sintellect analyze --all-namespaces
    python -m k8sintellect serve --port 3000
"""

from __future__ import annotations

from k8sintellect.cli import cli

cli(prog_name="k8sintellect")
