"""Allow ``python -m autofix``."""

from autofix.cli import app

if __name__ == "__main__":
    app()
