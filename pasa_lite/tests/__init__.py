#!/usr/bin/env python3

"""
Test suite for the alignment validation pipeline.

Unit tests covering:
- Alignment data structures and orientation re-mapping
- Configuration management and validation
- Alignment parsing and indexing
- The validation rule chain
- Output routing and the scaffold worker pool
- Overlap clustering
- End-to-end runs of the pipeline
"""
