"""CLI entry point for songpad.cli module.

Enables execution via: python -m songpad.cli
"""

from songpad.cli.watch_songs import main

if __name__ == "__main__":
    raise SystemExit(main())
