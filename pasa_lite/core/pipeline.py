#!/usr/bin/env python3

"""
Main pipeline class for alignment validation.

Builds the alignment index, then validates each scaffold's alignments in a
bounded worker pool and writes every record to the valid or invalid output.
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence

from .alignment_index import AlignmentIndex
from .config import ValidatorConfig
from .data_structures import TaskFault, TaskSummary
from .exceptions import WorkerFaultError
from .output import OutputRouter
from .parsers import GenomeSequenceStore
from .validator import TranscriptValidator
from .workers import ValidationWorkerPool
from ..utils.performance_monitor import PerformanceMonitor


@dataclass
class RunSummary:
    """Outcome of one validation run."""
    valid_path: str
    invalid_path: str
    alignment_count: int = 0
    scaffold_count: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    faults: List[TaskFault] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.faults


class AlignmentValidationPipeline:
    """Coordinates index build, scaffold validation and output routing."""

    def __init__(self, config: ValidatorConfig, sequence_store=None):
        self.config = config
        self.sequence_store = sequence_store
        self.validator = TranscriptValidator.from_config(config)
        self.monitor = PerformanceMonitor(memory_limit_mb=config.memory_limit_mb,
                                          enabled=config.enable_memory_monitoring)

    def run(self, alignment_files: Sequence[str], genome_file: Optional[str] = None) -> RunSummary:
        """
        Validate every alignment of the given GFF3/GTF files.

        Args:
            alignment_files: GFF3/GTF alignment files, indexed in the given order
            genome_file: Genome FASTA (not needed when a sequence store was supplied)

        Returns:
            RunSummary with per-sink counts

        Raises:
            WorkerFaultError: one or more scaffold tasks failed; raised after
                every task finished and the outputs were closed
        """
        log_handler = self._setup_pipeline_logging()
        try:
            logging.info("Starting alignment validation")
            logging.info(f"Configuration: {self.config}")
            logging.info(f"Alignment files: {', '.join(alignment_files)}")

            owns_store = self.sequence_store is None
            if owns_store:
                logging.info(f"Genome file: {genome_file}")
                self.sequence_store = GenomeSequenceStore(genome_file)

            try:
                summary = self._validate(alignment_files)
            finally:
                if owns_store:
                    self.sequence_store.close()
                    self.sequence_store = None
            self.monitor.log_performance_report()
        finally:
            logging.getLogger().removeHandler(log_handler)
            log_handler.close()

        if summary.faults:
            raise WorkerFaultError(summary.faults)

        logging.info(f"Validation complete: {summary.valid_count} valid, "
                     f"{summary.invalid_count} invalid alignments")
        return summary

    def _setup_pipeline_logging(self) -> logging.Handler:
        """Set up pipeline-specific logging."""
        log_file = f"{self.config.out_prefix}.log"
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(threadName)s - %(message)s'
        ))

        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        if self.config.debug_mode:
            root_logger.setLevel(logging.DEBUG)
        return file_handler

    def _validate(self, alignment_files: Sequence[str]) -> RunSummary:
        index = AlignmentIndex(self.config.index_dir)
        router = OutputRouter(self.config.out_prefix)
        summary = RunSummary(valid_path=router.valid_path, invalid_path=router.invalid_path)

        try:
            with self.monitor.phase_context("index_build") as metrics:
                groups = index.build(alignment_files)
                metrics.operations_count = len(index)
            self.monitor.check_memory_limit()

            summary.alignment_count = len(index)
            summary.scaffold_count = len(groups)

            with router:
                with self.monitor.phase_context("validation") as metrics:
                    task = partial(self._validate_scaffold, index, router)
                    with ValidationWorkerPool(task, self.config.cpu) as pool:
                        for scaffold, accessions in groups.items():
                            pool.submit(scaffold, accessions)
                        summary.faults = pool.await_all()

                    for task_summary in pool.results.values():
                        summary.valid_count += task_summary.valid_count
                        summary.invalid_count += task_summary.invalid_count
                    metrics.operations_count = summary.valid_count + summary.invalid_count
            # collected worker faults are reported ahead of a memory limit breach
            if not summary.faults:
                self.monitor.check_memory_limit()
        finally:
            index.close()

        return summary

    def _validate_scaffold(self, index: AlignmentIndex, router: OutputRouter,
                           scaffold: str, accessions: Sequence[str]) -> TaskSummary:
        """Validate all alignments of one scaffold; runs inside a worker thread."""
        task_summary = TaskSummary(scaffold)
        sequence = self.sequence_store.get_sequence(scaffold)

        with index.open() as handle:
            for accession in accessions:
                record = handle.get(accession)
                self.validator.validate(record, sequence)
                if router.route(record):
                    task_summary.valid_count += 1
                else:
                    task_summary.invalid_count += 1

        logging.debug(f"Scaffold {scaffold}: {task_summary.valid_count} valid, "
                      f"{task_summary.invalid_count} invalid")
        return task_summary
