"""Allow ``python -m project_exporter``."""

from .workflow.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
