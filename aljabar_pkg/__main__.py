"""Main entry point for running aljabar_pkg as a module.

This allows running Aljabar with:
    python -m aljabar_pkg --health-check
    python -m aljabar_pkg --optimize "a + a"
    python -m aljabar_pkg --solve "x^2 = 9" --variable x

This is equivalent to running:
    python -m aljabar_pkg.cli
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
