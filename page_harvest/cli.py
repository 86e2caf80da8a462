#!/usr/bin/env python3
"""
Command-line entry point for PageHarvest.

Commands:
  run       Harvest the root listing and every child listing
  config    Show the effective configuration
  status    Show per-child item counts stored in the checkpoint

Common options:
  --config PATH       Path to the YAML/JSON config (default: configs/default.yaml)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only if omitted)
  --log-format FORMAT Logging format string

Example:
  page-harvest --config configs/default.yaml run --limit 5 --output out/locations.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from page_harvest import __version__
from page_harvest.checkpoint import CheckpointStore, summarize
from page_harvest.config import load_config
from page_harvest.engine import start_harvest
from page_harvest.logger import DEFAULT_FORMAT, init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PageHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the YAML/JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stdout only if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """PageHarvest command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('run', context_settings=CONTEXT_SETTINGS)
@click.option('--root-url', 'root_url', default=None, help='Override the root listing URL')
@click.option(
    '--output', '-o', 'output_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Override the checkpoint/result JSON path'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Max. number of child nodes to harvest in this run'
)
@click.option(
    '--fetcher', 'fetcher',
    type=click.Choice(['browser', 'http']),
    default=None,
    help='Page fetcher backend'
)
@click.pass_context
def run(ctx, root_url, output_path, limit, fetcher):
    """Run the harvest and write the dataset."""
    try:
        cfg = ctx.obj['config'].override(
            root_url=root_url,
            output_path=output_path,
            max_children=limit,
            fetcher=fetcher,
        )
    except Exception as e:
        print_error(f'Invalid option: {e}')
    click.echo(f'Starting harvest of {cfg.root_url}')
    try:
        dataset = asyncio.run(start_harvest(cfg))
    except Exception as e:
        print_error(f'Harvest failed: {e}')
    total = sum(len(items) for items in dataset.values())
    click.echo(f'Harvested {len(dataset)} child node(s), {total} item(s): {cfg.output_path}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the current configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


@cli.command('status', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--output', '-o', 'output_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Checkpoint to inspect (defaults to the configured output path)'
)
@click.pass_context
def status(ctx, output_path):
    """Show item counts per harvested child node."""
    path = output_path or ctx.obj['config'].output_path
    counts = summarize(CheckpointStore(path).load())
    click.echo(json.dumps(counts, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
