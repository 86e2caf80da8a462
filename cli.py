# cli.py

"""
Entry point for running PageHarvest from a source checkout.

Example:
    python cli.py --config configs/default.yaml run --limit 5
"""
from page_harvest.cli import cli

if __name__ == '__main__':
    cli()
