from __future__ import annotations

from .app.headless import main, parse_counts, run_headless

__all__ = ["main", "parse_counts", "run_headless"]


if __name__ == "__main__":
    main()
