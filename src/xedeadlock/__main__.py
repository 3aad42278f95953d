"""Entry point for python -m xedeadlock."""

from xedeadlock.cli import cli

if __name__ == "__main__":
    cli()
