"""Drift Detector - Compares upstream and downstream versions of a project."""

from streamcheck.detector.detector import DriftDetector
from streamcheck.detector.models import DriftDecision, DriftReport, StreamDrift

__all__ = [
    "DriftDecision",
    "DriftDetector",
    "DriftReport",
    "StreamDrift",
]
