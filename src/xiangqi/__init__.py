"""Xiangqi rules engine and turn orchestration."""

__version__ = "0.1.0"
