"""
Command-line interface for bio-relatives.

Compares aligned genomes of two persons, or of a father, mother and
child, over a panel of genomic intervals.
"""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import ComparatorType, ComparisonConfig, threshold_policy_from_dict
from .exceptions import GenomeError

MODE_CODES = ['L', 'H', 'X', 'Y']


def common_options(func):
    """Options shared by compare2 and compare3."""
    options = [
        click.option('--mode', '-m', type=click.Choice(MODE_CODES, case_sensitive=False),
                     default=None,
                     help='L: Levenshtein, H: Hamming, X: X-STR, Y: Y-STR (default: L)'),
        click.option('--threads', '-t', type=int, default=None,
                     help='Number of features compared in parallel (default: 1)'),
        click.option('--threshold-scheme', type=click.Choice(['single', 'tiered']),
                     default=None,
                     help='single: 99.7% for every chromosome; tiered: 98% MT, 45% X and autosomes'),
        click.option('--config', 'config_file', type=click.Path(exists=True),
                     help='YAML configuration file'),
        click.option('--intermediate-output', '-io', is_flag=True, default=False,
                     help='Log every per-region comparison result'),
        click.option('--tsv', 'tsv_path', type=click.Path(),
                     help='Write the similarity table to a TSV file'),
        click.option('--verbose', '-v', is_flag=True, default=False,
                     help='Enable debug logging'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def build_config(mode, threads, threshold_scheme, config_file, intermediate_output) -> ComparisonConfig:
    """Merge a YAML config file with command-line overrides."""
    overrides = {
        'mode': ComparatorType.from_code(mode) if mode else None,
        'threads': threads,
        'threshold_policy': (
            threshold_policy_from_dict({'scheme': threshold_scheme}) if threshold_scheme else None
        ),
        'intermediate_output': True if intermediate_output else None,
    }

    if config_file:
        return ComparisonConfig.from_yaml(Path(config_file), **overrides)

    return ComparisonConfig(**{k: v for k, v in overrides.items() if v is not None})


@click.group()
@click.version_option(version=__version__)
def cli():
    """bio-relatives: kinship analysis of aligned genomes."""
    pass


@cli.command()
@click.argument('first', type=click.Path(exists=True))
@click.argument('second', type=click.Path(exists=True))
@click.argument('panel', type=click.Path(exists=True))
@common_options
def compare2(first, second, panel, mode, threads, threshold_scheme, config_file,
             intermediate_output, tsv_path, verbose):
    """
    Decide whether two persons are parent and child.

    FIRST and SECOND are indexed BAM files, PANEL is a BED file of
    features (or a marker file for the STR modes).

    \b
    Example:
      bio-relatives compare2 father.bam son.bam panel.bed -m L -t 4
    """
    from .runner import run_two

    setup_logging(verbose)

    try:
        config = build_config(mode, threads, threshold_scheme, config_file, intermediate_output)
        result = run_two(first, second, Path(panel), config=config,
                             tsv_path=Path(tsv_path) if tsv_path else None)
    except GenomeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(result.report)


@cli.command()
@click.argument('father', type=click.Path(exists=True))
@click.argument('mother', type=click.Path(exists=True))
@click.argument('child', type=click.Path(exists=True))
@click.argument('panel', type=click.Path(exists=True))
@common_options
def compare3(father, mother, child, panel, mode, threads, threshold_scheme, config_file,
             intermediate_output, tsv_path, verbose):
    """
    Compare a child with both parents.

    In the edit-distance modes each chromosome is also attributed to
    the parent it most resembles. Y-STR mode is not available here.

    \b
    Example:
      bio-relatives compare3 father.bam mother.bam child.bam panel.bed -m H
    """
    from .io.output import write_similarity_tsv
    from .runner import run_trio

    setup_logging(verbose)

    try:
        config = build_config(mode, threads, threshold_scheme, config_file, intermediate_output)
        result = run_trio(father, mother, child, Path(panel), config=config)
        if tsv_path:
            tsv = Path(tsv_path)
            write_similarity_tsv(result.father, tsv.with_name(f"{tsv.stem}.father{tsv.suffix}"))
            write_similarity_tsv(result.mother, tsv.with_name(f"{tsv.stem}.mother{tsv.suffix}"))
    except GenomeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(result.report)


if __name__ == '__main__':
    cli()
