# src/hosttest/__main__.py

from hosttest.cli.main import cli

if __name__ == "__main__":
    cli()
