"""Allow ``python -m staxpress``."""

from staxpress.cli import cli

if __name__ == "__main__":
    cli()
