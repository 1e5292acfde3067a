#!/usr/bin/env python3

"""
PASA-lite alignment validation

Validates spliced transcript alignments (GFF3/GTF) against a reference
genome and splits them into valid and invalid outputs.

Modules:
- core: data structures, configuration, alignment index, validation rules,
  output routing, scaffold worker pool and overlap clustering
- utils: performance monitoring
- tests: unit test suite
"""

__version__ = "0.1.0"

from .core.data_structures import AlignmentRecord, Segment
from .core.exceptions import (
    PipelineError, ParseError, ConfigurationError, GenomeError,
    IndexStoreError, OutputError, MemoryLimitError, WorkerFaultError
)
from .core.config import ValidatorConfig, load_config
from .core.clustering import OverlapClusterer
from .core.pipeline import AlignmentValidationPipeline, RunSummary

__all__ = [
    # Main pipeline
    'AlignmentValidationPipeline', 'RunSummary',
    # Data structures
    'AlignmentRecord', 'Segment',
    # Clustering
    'OverlapClusterer',
    # Exceptions
    'PipelineError', 'ParseError', 'ConfigurationError', 'GenomeError',
    'IndexStoreError', 'OutputError', 'MemoryLimitError', 'WorkerFaultError',
    # Configuration
    'ValidatorConfig', 'load_config'
]
