"""Reminder and digest notification pipeline for the TaskDesk platform."""

__version__ = "1.0.0"
