"""Module entrypoint.

Allows:
    python -m jl
"""

from __future__ import annotations

from jl.cli import main

if __name__ == "__main__":
    main()
