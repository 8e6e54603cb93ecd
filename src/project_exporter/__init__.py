"""Export a project directory to a new GitHub repository."""

__version__ = "0.1.0"
