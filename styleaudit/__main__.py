"""
Main entry point for styleaudit when run as a module.
Allows execution via: python -m styleaudit
"""

from styleaudit.cli import cli

if __name__ == '__main__':
    cli()
