"""Run with ``python -m signalroom``."""

from signalroom.cli.server import cli

if __name__ == '__main__':
    cli()
