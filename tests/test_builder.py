"""
Integration tests for pdftoolkit/pdf/builder.py — complete Project Reports.
"""
import pytest
import numpy as np
import pandas as pd

from pdftoolkit.exceptions import ColumnCoverageError
from pdftoolkit.models.project import ProjectProperties
from pdftoolkit.pdf import (
    Compliance,
    ReportConfig,
    TableSection,
    VisualizationSection,
    build_project_report,
)


@pytest.fixture
def speaker_df():
    np.random.seed(42)
    n = 120
    return pd.DataFrame({
        "name": [f"Speaker {i}" for i in range(n)],
        "delay_ms": np.random.uniform(0, 20, n).round(2),
        "level_db": np.random.normal(-6, 2, n).round(1),
        "muted": [i % 7 == 0 for i in range(n)],
    })


@pytest.fixture
def fast_config():
    return ReportConfig(compliance=Compliance.NONE, locale="en_US")


class TestBuildProjectReport:

    def test_front_page_only(self, branding, properties, fast_config):
        pdf_bytes = build_project_report(branding, "Project Report", properties, config=fast_config)
        assert pdf_bytes.startswith(b"%PDF")

    def test_full_report(self, branding, properties, fast_config, speaker_df, make_image):
        properties = ProjectProperties(
            "Main Hall",
            venue="Civic Center",
            use_project_notes=True,
            project_notes="Rigging points checked.\r\nFront fills pending.",
        )
        visualization = VisualizationSection(
            chart_label="Coverage",
            layout_width=800.0,
            chart1=make_image(600, 300),
            chart2=make_image(600, 200),
            chart_legend=make_image(150, 300),
            information=["Frequency: 1 kHz", "Temperature: 20 C"],
        )
        tables = [
            TableSection(
                title="Speakers",
                column_names=["Name", "Delay (ms)", "Level (dB)", "Muted"],
                rows=speaker_df,
                span_names=["Loudspeaker", "Processing"],
                span_lengths=[1, 2],
            ),
            TableSection(
                title="Amplifiers",
                column_names=["Model", "Channels"],
                rows=[["AMP-4", 4], ["AMP-8", None]],
                column_widths_in_pixels=[200, 100],
                landscape_mode=True,
            ),
        ]

        pdf_bytes = build_project_report(
            branding, "Project Report", properties, [visualization], tables, config=fast_config
        )
        assert pdf_bytes.startswith(b"%PDF")
        assert len(pdf_bytes) > 1000

    def test_failed_chart_is_skipped(self, branding, properties, fast_config):
        visualization = VisualizationSection(chart_label=None, layout_width=500.0, chart1=object())
        pdf_bytes = build_project_report(
            branding, "Project Report", properties, [visualization], config=fast_config
        )
        assert pdf_bytes.startswith(b"%PDF")

    def test_saves_to_path(self, branding, properties, fast_config, tmp_path):
        output = tmp_path / "reports" / "project.pdf"
        pdf_bytes = build_project_report(
            branding, "Project Report", properties, output_path=str(output), config=fast_config
        )
        assert output.read_bytes() == pdf_bytes

    def test_bad_header_raises(self, branding, properties, fast_config):
        tables = [TableSection(title="Bad", column_names=["A", "B", "C"], rows=[], number_of_columns=2)]
        with pytest.raises(ColumnCoverageError):
            build_project_report(branding, "Project Report", properties, tables=tables, config=fast_config)

    def test_pdf_a_report(self, branding, properties, speaker_df):
        tables = [TableSection(title="Speakers", column_names=list(speaker_df.columns), rows=speaker_df.head(10))]
        pdf_bytes = build_project_report(
            branding, "Project Report", properties, tables=tables,
            config=ReportConfig(compliance=Compliance.PDF_A_1B, need_medium_table_fonts=True),
        )
        assert pdf_bytes.startswith(b"%PDF")
