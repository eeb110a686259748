"""Drift domain — shallow snapshot diff and per-asset evaluation."""

from posturemcp.drift.diff import canonical_json
from posturemcp.drift.diff import diff_snapshots
from posturemcp.drift.diff import ROOT_KEY
from posturemcp.drift.evaluator import build_summary
from posturemcp.drift.evaluator import drift_fingerprint
from posturemcp.drift.evaluator import evaluate_drift
from posturemcp.drift.evaluator import SUMMARY_PREFIX

__all__ = [
    "ROOT_KEY",
    "SUMMARY_PREFIX",
    "build_summary",
    "canonical_json",
    "diff_snapshots",
    "drift_fingerprint",
    "evaluate_drift",
]
