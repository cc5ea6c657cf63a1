"""Diff triage, evaluation prompts, review state and usage tracking for automated pull request review."""

__version__ = "0.1.0"