"""
Renderers for filled documents (PDF conversion and printing).
"""

from .pdf_converter import PdfConverter, is_thermal_printer, paper_size_points

__all__ = [
    "PdfConverter",
    "is_thermal_printer",
    "paper_size_points",
]
