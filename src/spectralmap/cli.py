"""
Command-line interface for spectralmap.

Usage:
    python -m spectralmap <command> [options]

Commands:
    decompose    Build the co-occurrence matrix and its SVD
    spectrum     Rank the eigenvectors a term is similar to
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

from ._config import SpectralMapConfig
from ._errors import ConfigurationError, SpectralMapError
from .io import read_dense_matrix, read_double_array, read_word_list
from .math import find_term, rank_term
from .pipeline import DecomposePaths, DecomposePipeline

logger = logging.getLogger("spectralmap.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(args: argparse.Namespace) -> SpectralMapConfig:
    config = SpectralMapConfig.load(args.config)
    if getattr(args, "rank", None) is not None:
        config.decompose.rank = args.rank
    if getattr(args, "delimiter", None) is not None:
        config.decompose.delimiter = args.delimiter
    if getattr(args, "stream", False):
        config.decompose.stream_dense_export = True
    if getattr(args, "index_base", None) is not None:
        config.decompose.index_base = args.index_base
    if getattr(args, "top_k", None) is not None:
        config.spectrum = dataclasses.replace(config.spectrum, top_k=args.top_k)
    return config.validate()


def cmd_decompose(args: argparse.Namespace) -> int:
    """Run the decomposition pipeline."""
    # Argument count is checked before the config or any input is touched.
    paths = DecomposePaths.from_args(args.paths)
    config = _load_config(args)
    result = DecomposePipeline(config.decompose).run(paths)
    print(
        f"Co-occurrence {result.cooccurrence.shape[0]}x{result.cooccurrence.shape[1]}, "
        f"{result.decomposition.rank} singular triplets written"
    )
    return EXIT_OK


def cmd_spectrum(args: argparse.Namespace) -> int:
    """Print the eigenvectors most similar to a term and their wavelengths."""
    config = _load_config(args)
    cooccurrence = read_dense_matrix(args.cooccurrence)
    eigenvectors = read_dense_matrix(args.eigenvectors)
    singular_values = read_double_array(args.eigenvalues)
    words = read_word_list(args.terms)

    term_index = find_term(words, args.term)
    matches = rank_term(
        cooccurrence, eigenvectors, term_index, singular_values, config.spectrum
    )

    print(" ".join(str(m) for m in matches))
    similar = [m for m in matches if m.similar]
    if not similar:
        print(f"No eigenvector passes the cutoff {config.spectrum.similarity_cutoff}")
    for m in similar:
        print(f"{m.eigenvector}\t{m.cosine:.6f}\t{m.wavelength:.1f} nm")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectralmap",
        description="Term co-occurrence matrices and their spectral decomposition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Co-occurrence matrix and 100 singular triplets
  spectralmap decompose --rank 100 td.txt cooc.txt ut.txt vt.txt s.txt

  # Eigenvectors similar to a term
  spectralmap spectrum cooc.txt ut.txt s.txt terms.txt light
""",
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file (spectralmap.toml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only report warnings and errors",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # decompose subcommand
    dec_parser = subparsers.add_parser(
        "decompose",
        help="Build the co-occurrence matrix and its SVD",
        description=(
            "Paths: term-document matrix, co-occurrence output, left singular "
            "vectors output, right singular vectors output, singular values output"
        ),
    )
    dec_parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Exactly five file paths",
    )
    dec_parser.add_argument(
        "--rank", "-k",
        type=int,
        help="Number of singular triplets to compute",
    )
    dec_parser.add_argument(
        "--delimiter", "-d",
        help="Separator between values in dense output",
    )
    dec_parser.add_argument(
        "--stream",
        action="store_true",
        help="Write the co-occurrence matrix row by row",
    )
    dec_parser.add_argument(
        "--index-base",
        type=int,
        choices=(0, 1),
        dest="index_base",
        help="Index base of the term-document file (detected when omitted)",
    )

    # spectrum subcommand
    spec_parser = subparsers.add_parser(
        "spectrum",
        help="Rank the eigenvectors a term is similar to",
    )
    spec_parser.add_argument("cooccurrence", type=Path, help="Dense co-occurrence matrix")
    spec_parser.add_argument("eigenvectors", type=Path, help="Left singular vectors")
    spec_parser.add_argument("eigenvalues", type=Path, help="Singular values")
    spec_parser.add_argument("terms", type=Path, help="Index term list")
    spec_parser.add_argument("term", help="Term to look up")
    spec_parser.add_argument(
        "--top-k",
        type=int,
        dest="top_k",
        help="Number of eigenvectors to report",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        if args.command == "decompose":
            return cmd_decompose(args)
        elif args.command == "spectrum":
            return cmd_spectrum(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return EXIT_CONFIG
    except SpectralMapError as e:
        logger.error("%s", e)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_FAILURE
