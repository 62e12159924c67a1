"""k8sintellect command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``k8sintellect`` script).
"""

from k8sintellect.cli.main import cli

__all__ = ["cli"]
