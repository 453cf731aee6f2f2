"""Workflow nodes shipped by this package."""

from report_generator.nodes.generate_report import GenerateReportNode

__all__ = [
    "GenerateReportNode",
]
