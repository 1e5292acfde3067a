#!/usr/bin/env python3

"""
Utility helpers for the alignment validation pipeline.
"""

from .performance_monitor import PerformanceMetrics, PerformanceMonitor

__all__ = ['PerformanceMetrics', 'PerformanceMonitor']
