"""Module entry point: python -m poi_proximity ..."""

from __future__ import annotations

from poi_proximity.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
