"""Reporting utilities for netplayground runs."""

from .artifacts import write_manifest
from .metrics import CsvSink, HistoryCapture, JsonlSink
from .plots import PlotAdapter, save_boundary

__all__ = ["CsvSink", "HistoryCapture", "JsonlSink", "PlotAdapter", "save_boundary", "write_manifest"]
