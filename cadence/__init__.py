"""
CADENCE v1.0 — Rule-Based Capacity Forecasting Engine

A deterministic, interpretable engine that turns self-assessment answers
and a sparse burnout history into EPC sub-scores, a multi-day burnout
forecast, a dense intraday reconstruction, and ranked explanations.

Core engine is fully stateless and safe for backend/API usage.

Public API:
    analyze(filepath)             → CLI mode
    analyze_data(data)            → UI / backend mode
    reconstruct_intraday(rows)    → async intraday gap filling
    generate_report(result)       → formatted report
"""

from cadence.pipeline import analyze, analyze_data, generate_report, reconstruct_intraday

__version__ = "1.0.0"

__all__ = ["analyze", "analyze_data", "generate_report", "reconstruct_intraday"]
