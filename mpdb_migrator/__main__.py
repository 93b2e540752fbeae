"""
Entry point for running the migrator as a module.

Usage: python -m mpdb_migrator <command> [options]
"""

from mpdb_migrator.cli import app

if __name__ == "__main__":
    app()
