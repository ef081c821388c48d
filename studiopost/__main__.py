"""
Convenience entry point for running studiopost directly.

Usage: python -m studiopost [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
