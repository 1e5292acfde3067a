#!/usr/bin/env python3

"""
Core module for the alignment validation pipeline.

Contains data structures, exception types, configuration, the alignment
index, the validation rule chain, output routing, the scaffold worker pool
and overlap clustering.
"""

from .data_structures import AlignmentRecord, Segment, TaskFault, TaskSummary, ValidationResult
from .exceptions import (
    PipelineError, ParseError, ConfigurationError, GenomeError,
    IndexStoreError, OutputError, MemoryLimitError, WorkerFaultError
)
from .config import ValidatorConfig, load_config
from .alignment_index import AlignmentIndex, IndexHandle
from .partitioner import ScaffoldPartitioner
from .validator import TranscriptValidator
from .output import OutputRouter
from .workers import ValidationWorkerPool
from .clustering import OverlapClusterer

__all__ = [
    'AlignmentRecord', 'Segment', 'TaskFault', 'TaskSummary', 'ValidationResult',
    'PipelineError', 'ParseError', 'ConfigurationError', 'GenomeError',
    'IndexStoreError', 'OutputError', 'MemoryLimitError', 'WorkerFaultError',
    'ValidatorConfig', 'load_config',
    'AlignmentIndex', 'IndexHandle', 'ScaffoldPartitioner',
    'TranscriptValidator', 'OutputRouter', 'ValidationWorkerPool', 'OverlapClusterer'
]
