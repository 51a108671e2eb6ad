"""Exporters package — convert reports to various output formats."""
from marginpilot.exporters.markdown import render_analytics_markdown, render_dashboard_markdown

__all__ = ["render_analytics_markdown", "render_dashboard_markdown"]
