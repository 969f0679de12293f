"""Report exporter for FocusReport.

Generates Word (.docx) documents from daily metrics using python-docx.
"""

import logging
import os
from datetime import date

from focusreport.core.models import DailyMetrics
from focusreport.reporting.summary import NO_APPS_TEXT, SummaryGenerator

logger = logging.getLogger(__name__)


class ReportExporter:
    """Exports a day's metrics to a formatted Word document (.docx)."""

    def export_daily(
        self, day: date, metrics: DailyMetrics, user_name: str, output_path: str
    ) -> str:
        """Generate a .docx file for *day*.

        Args:
            day: The calendar day the metrics describe.
            metrics: The metrics to export.
            user_name: The user's configured display name.
            output_path: File path for the generated .docx file.

        Returns:
            The path to the generated file.

        Raises:
            ImportError: If python-docx is not installed.
        """
        try:
            from docx import Document
            from docx.enum.text import WD_ALIGN_PARAGRAPH
            from docx.shared import Pt
        except ImportError:
            raise ImportError(
                "python-docx is required for report export. "
                "Install it with: pip install python-docx"
            )

        parent_dir = os.path.dirname(output_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        doc = Document()

        # --- Title ---
        title_para = doc.add_paragraph()
        title_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title_para.add_run("FocusReport Daily Report")
        run.bold = True
        run.font.size = Pt(24)

        date_para = doc.add_paragraph()
        date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = date_para.add_run(day.strftime("%A, %B %d, %Y"))
        run.font.size = Pt(14)

        if user_name:
            name_para = doc.add_paragraph()
            name_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = name_para.add_run(f"Prepared for: {user_name}")
            run.font.size = Pt(12)

        # --- Overview ---
        doc.add_heading("Overview", level=1)
        generator = SummaryGenerator()
        self._add_table(
            doc,
            ("Metric", "Value"),
            [
                ("Active time", f"{metrics.total_active_minutes}m"),
                ("Longest focus block", f"{metrics.longest_focus_minutes}m"),
                ("Context switches", str(metrics.context_switches)),
                ("Switch rate", generator.switch_rate(metrics)),
                ("Focus quality", generator.focus_quality(metrics)),
                ("Deep work", f"{metrics.deep_work_minutes}m"),
                ("Shallow work", f"{metrics.shallow_work_minutes}m"),
                ("Distraction", f"{metrics.distraction_minutes}m"),
            ],
        )

        # --- Top apps ---
        doc.add_heading("Top Apps", level=1)
        if not metrics.top_apps:
            doc.add_paragraph(NO_APPS_TEXT)
        else:
            self._add_table(
                doc,
                ("App", "Minutes"),
                [(a.app_name, str(a.minutes)) for a in metrics.top_apps],
            )

        # --- Recommendations ---
        doc.add_heading("What to Improve Tomorrow", level=1)
        for rec in generator.recommendations(metrics):
            doc.add_paragraph(rec, style="List Number")

        doc.save(output_path)
        logger.info("Exported daily report for %s to %s", day.isoformat(), output_path)
        return output_path

    @staticmethod
    def _add_table(doc, header: tuple[str, str], rows: list[tuple[str, str]]) -> None:
        """Add a two-column table with a bold header row."""
        table = doc.add_table(rows=1 + len(rows), cols=2)
        table.style = "Light Grid Accent 1"

        header_cells = table.rows[0].cells
        header_cells[0].text, header_cells[1].text = header

        for i, (left, right) in enumerate(rows, start=1):
            cells = table.rows[i].cells
            cells[0].text = left
            cells[1].text = right

        for cell in table.rows[0].cells:
            for paragraph in cell.paragraphs:
                for run in paragraph.runs:
                    run.bold = True

        doc.add_paragraph()  # spacing after table
