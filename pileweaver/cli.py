#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for PileWeaver.

This module provides the main CLI entry point and all subcommands for
the PileWeaver long-read correction tool.
"""

import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.schema import (
    ConfigValidationError,
    load_config,
    save_config_template,
    validate_config,
)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    PileWeaver: Long-Read Correction from Alignment Piles

    Splits each long read into coverage-supported windows, gathers the
    aligned fragments of every window and rebuilds the window through
    the k-mer graph of its pile.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


def _load_or_exit(config_file):
    """Load and validate a configuration, exiting with status 1 on error."""
    try:
        config = load_config(Path(config_file) if config_file else None)
    except (FileNotFoundError, ConfigValidationError) as e:
        click.echo(f"✗ Error loading configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("✗ Configuration validation failed:", err=True)
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    return config


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='pileweaver_config.yaml',
              help='Output configuration file path')
def config_init(output):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating configuration template: {output}")

    try:
        save_config_template(Path(output))
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Configuration file created: {output}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
def config_show(config_file):
    """Display the merged configuration (defaults + CONFIG_FILE)."""
    config = _load_or_exit(config_file)
    click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    _load_or_exit(config_file)
    click.echo("✓ Configuration is valid")


# ============================================================================
# Pile Inspection
# ============================================================================

@main.command()
@click.option('--alignments', '-a', required=True, type=click.Path(exists=True),
              help='PAF alignments (query = long read, target = supporting sequence)')
@click.option('--reads', '-r', 'reads_files', required=True, multiple=True,
              type=click.Path(exists=True),
              help='FASTA file(s) with long reads and supporting sequences')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.pass_context
def piles(ctx, alignments, reads_files, config_file):
    """Print the windows of every aligned read as TSV (read, begin, end, depth)."""
    from .io import SequenceStore, read_paf, group_alignments_by_query
    from .piles import get_alignment_piles

    cfg = _load_or_exit(config_file)
    pile_cfg = cfg['piles']

    try:
        sequences = SequenceStore.from_fasta(*reads_files)
        groups = group_alignments_by_query(read_paf(alignments))
        for read_id, read_alignments in groups.items():
            windows, read_piles = get_alignment_piles(
                read_alignments,
                pile_cfg['min_support'], pile_cfg['window_size'], pile_cfg['window_overlap'],
                sequences, cfg['dbg']['mer_size'],
            )
            for (beg, end), pile in zip(windows, read_piles):
                click.echo(f"{read_id}\t{beg}\t{end}\t{len(pile)}")
    except (KeyError, ValueError) as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)


# ============================================================================
# Correction
# ============================================================================

@main.command()
@click.option('--alignments', '-a', required=True, type=click.Path(exists=True),
              help='PAF alignments (query = long read, target = supporting sequence)')
@click.option('--reads', '-r', 'reads_files', required=True, multiple=True,
              type=click.Path(exists=True),
              help='FASTA file(s) with long reads and supporting sequences')
@click.option('--output', '-o', required=True, type=click.Path(),
              help='Output FASTA of corrected reads')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--window-size', type=int, default=None, help='Override piles.window_size')
@click.option('--min-support', type=int, default=None, help='Override piles.min_support')
@click.option('--kmer-size', '-k', type=int, default=None, help='Override dbg.mer_size')
@click.option('--solid', type=int, default=None, help='Override dbg.solid_threshold')
@click.option('--extend/--no-extend', default=None, help='Extend read ends through the graph')
@click.pass_context
def correct(ctx, alignments, reads_files, output, config_file, window_size,
            min_support, kmer_size, solid, extend):
    """Correct long reads from the piles of their aligned sequences."""
    from .utils.pipeline import CorrectionPipeline

    cfg = _load_or_exit(config_file)

    overrides = {
        ('piles', 'window_size'): window_size,
        ('piles', 'min_support'): min_support,
        ('dbg', 'mer_size'): kmer_size,
        ('dbg', 'solid_threshold'): solid,
        ('extension', 'enabled'): extend,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            cfg[section][key] = value

    errors = validate_config(cfg)
    if errors:
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    if ctx.obj.get('VERBOSE'):
        cfg['output']['logging']['level'] = 'DEBUG'
    elif ctx.obj.get('QUIET'):
        cfg['output']['logging']['level'] = 'WARNING'

    output_path = Path(output)
    try:
        pipeline = CorrectionPipeline(cfg, output_dir=output_path.parent)
        summary = pipeline.run(alignments, list(reads_files), output_path)
    except (KeyError, ValueError) as e:
        click.echo(f"✗ Correction failed: {e}", err=True)
        sys.exit(1)

    if not ctx.obj.get('QUIET'):
        click.echo(summary.summary())
        click.echo(f"✓ Corrected reads written to {output_path}")


if __name__ == '__main__':
    main()
