"""Reporting components."""

from .report import render_opportunities, render_stats, print_report

__all__ = [
    "render_opportunities",
    "render_stats",
    "print_report",
]
