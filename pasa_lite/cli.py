#!/usr/bin/env python3

"""
Command-line interface for alignment validation.

Validates GFF3/GTF transcript alignments against a genome and writes
<out_prefix>.valid_alignments.gtf and <out_prefix>.invalid_alignments.gtf.
"""

import argparse
import sys
import os
import logging
from pathlib import Path

from pasa_lite.core.config import load_config
from pasa_lite.core.exceptions import PipelineError, WorkerFaultError
from pasa_lite.core.parsers import GFF3_EXTENSIONS, GTF_EXTENSIONS


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Validate spliced transcript alignments against a reference genome",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  pasa-lite --genome genome.fa gmap.gff3 blat.gtf

  # Reject unspliced and non-consensus alignments, 4 threads
  pasa-lite --genome genome.fa --CPU 4 --discard_unspliced_transcripts --require_consensus_splicesites gmap.gff3
        """
    )

    parser.add_argument(
        'alignments',
        nargs='+',
        help='Alignment files (*.gtf or *.gff3)'
    )
    parser.add_argument(
        '--genome',
        required=True,
        help='Reference genome FASTA file'
    )
    parser.add_argument(
        '--CPU',
        dest='cpu',
        type=int,
        help='Number of scaffolds validated concurrently (default: 2)'
    )
    parser.add_argument(
        '--transcribed_is_aligned_orient',
        action='store_true',
        default=None,
        help='Take the aligned orientation as the transcribed orientation (strand-specific RNA-Seq)'
    )
    parser.add_argument(
        '--discard_unspliced_transcripts',
        action='store_true',
        default=None,
        help='Mark single-exon alignments invalid'
    )
    parser.add_argument(
        '--require_consensus_splicesites',
        action='store_true',
        default=None,
        help='Mark alignments with any non-consensus splice site invalid'
    )
    parser.add_argument(
        '--out_prefix',
        help='Output file prefix (default: pasa_lite)'
    )
    parser.add_argument(
        '--min_per_id',
        type=float,
        help='Minimum average percent identity (default: 95)'
    )
    parser.add_argument(
        '--config',
        help='Configuration file (JSON or YAML)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )

    return parser


def validate_input_files(parser: argparse.ArgumentParser, args) -> None:
    """Reject missing inputs and unsupported extensions before any work starts."""
    if not os.path.exists(args.genome):
        parser.error(f"genome file not found: {args.genome}")

    for path in args.alignments:
        if not path.lower().endswith(GFF3_EXTENSIONS + GTF_EXTENSIONS):
            parser.error(f"don't recognize file extension of {path}; expected .gtf or .gff3")
        if not os.path.exists(path):
            parser.error(f"alignment file not found: {path}")


def main(argv=None):
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    validate_input_files(parser, args)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(config_path=args.config, use_env=True)

        # Override config with command line arguments
        overrides = {
            'cpu': args.cpu,
            'min_per_id': args.min_per_id,
            'out_prefix': args.out_prefix,
            'transcribed_is_aligned_orient': args.transcribed_is_aligned_orient,
            'discard_unspliced_transcripts': args.discard_unspliced_transcripts,
            'require_consensus_splicesites': args.require_consensus_splicesites,
        }
        for field_name, value in overrides.items():
            if value is not None:
                setattr(config, field_name, value)

        # Re-validate after CLI overrides.
        config.validate()

        Path(config.out_prefix).parent.mkdir(parents=True, exist_ok=True)

        from pasa_lite import AlignmentValidationPipeline

        pipeline = AlignmentValidationPipeline(config)
        summary = pipeline.run(args.alignments, genome_file=args.genome)

        logger.info(f"Valid alignments: {summary.valid_path}")
        logger.info(f"Invalid alignments: {summary.invalid_path}")
        return 0

    except WorkerFaultError as e:
        for fault in e.faults:
            logger.error(f"Scaffold {fault.scaffold} failed: {fault.error}")
        logger.error(f"Pipeline failed: {e}")
        return 1
    except PipelineError as e:
        logger.error(f"Pipeline error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
