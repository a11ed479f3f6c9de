"""Reporting utilities for backpropnets."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import convergence, write_summary

__all__ = ["write_manifest", "CsvSink", "JsonlSink", "PlotAdapter", "convergence", "write_summary"]
