"""Reporting utilities for xornet."""

from .artifacts import write_manifest
from .console import ProgressPrinter
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["write_manifest", "ProgressPrinter", "CsvSink", "JsonlSink", "PlotAdapter", "write_summary"]
