"""
Entry point for ``python -m teeremap``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
