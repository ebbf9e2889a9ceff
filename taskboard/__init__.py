"""Taskboard: task/user assignment API with two-way reference sync."""

__version__ = "0.1.0"
