"""
PdfToolkit.

Report-formatting helpers for Project Reports written with ReportLab.
"""
