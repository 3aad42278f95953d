"""Report rendering and export."""

from xedeadlock.report.export import export_report_csv, export_report_json
from xedeadlock.report.formatting import format_report

__all__ = ["export_report_csv", "export_report_json", "format_report"]
