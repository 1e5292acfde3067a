#!/usr/bin/env python3

"""
Custom exceptions for the alignment validation pipeline.

Provides specific exception types for better error handling and debugging.
"""

from typing import List


class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""
    pass


class ParseError(PipelineError):
    """Error occurred during alignment file parsing."""
    
    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number
    
    def __str__(self):
        if self.filename and self.line_number:
            return f"Parse error in {self.filename} at line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class ConfigurationError(PipelineError):
    """Error in pipeline configuration."""
    pass


class GenomeError(PipelineError):
    """Error accessing genome reference."""
    
    def __init__(self, message: str, scaffold: str = ""):
        super().__init__(message)
        self.scaffold = scaffold
    
    def __str__(self):
        if self.scaffold:
            return f"Genome error at {self.scaffold}: {super().__str__()}"
        return super().__str__()


class IndexStoreError(PipelineError):
    """Alignment index could not be created, opened or read."""
    
    def __init__(self, message: str, accession: str = ""):
        super().__init__(message)
        self.accession = accession
    
    def __str__(self):
        if self.accession:
            return f"Index error for {self.accession}: {super().__str__()}"
        return super().__str__()


class OutputError(PipelineError):
    """Output sink could not be opened or written."""
    pass


class MemoryLimitError(PipelineError):
    """Memory usage exceeded limits."""
    
    def __init__(self, message: str, current_usage: float, limit: float):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit
    
    def __str__(self):
        return f"Memory error: {super().__str__()} (current: {self.current_usage:.1f}MB, limit: {self.limit:.1f}MB)"


class WorkerFaultError(PipelineError):
    """One or more scaffold tasks failed; raised only after every task finished."""
    
    def __init__(self, faults: List):
        super().__init__(f"{len(faults)} scaffold task(s) failed")
        self.faults = list(faults)
    
    def __str__(self):
        details = "; ".join(f"{fault.scaffold}: {fault.error!r}" for fault in self.faults)
        return f"{super().__str__()}: {details}" if details else super().__str__()
