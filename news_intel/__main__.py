"""Allow ``python -m news_intel``."""
from news_intel.cli import cli

if __name__ == "__main__":
    cli()
