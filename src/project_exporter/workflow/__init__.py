"""Export orchestration and command-line entry point."""
