"""Allow ``python -m devsetup``."""

from devsetup.main import cli

if __name__ == "__main__":
    cli()
