"""
PDF conversion and print dispatch.

Uses LibreOffice in headless mode to convert filled documents to PDF and to
print them. Thermal label printers get a Ghostscript-optimised PDF printed
through Ghostscript with a custom page size.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import FillOptions
from ..utils.exceptions import ConversionError

logger = logging.getLogger(__name__)

THERMAL_KEYWORDS = ("zebra", "bixolon", "datamax", "sato", "tsp")
PAPER_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)x(\d+(?:\.\d+)?)$")
DEFAULT_PAPER_POINTS = (288, 432)


def is_thermal_printer(printer_name: str, description: Optional[str] = None) -> bool:
    """
    Guess whether a printer is a thermal label printer.

    Args:
        printer_name: Printer queue name
        description: Driver or model description; looked up when omitted

    Returns:
        True when the name or description mentions a known thermal brand
    """
    if description is None:
        description = printer_description(printer_name) or ""
    haystack = f"{printer_name} {description}".lower()
    return any(keyword in haystack for keyword in THERMAL_KEYWORDS)


def printer_description(printer_name: str) -> Optional[str]:
    """Driver/model description reported by CUPS, None when unavailable."""
    try:
        result = subprocess.run(
            ["lpstat", "-l", "-p", printer_name],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (FileNotFoundError, subprocess.CalledProcessError) as e:
        logger.debug(f"Printer detection failed for {printer_name}: {e}")
        return None
    return result.stdout


def paper_size_points(paper_size: str) -> Tuple[int, int]:
    """
    Convert a ``WxH`` size in inches to points.

    Falls back to 4x6in when the size cannot be parsed.
    """
    match = PAPER_SIZE_PATTERN.match(paper_size.strip().lower())
    if not match:
        logger.warning(f"Invalid paper size {paper_size!r}, using 4x6")
        return DEFAULT_PAPER_POINTS
    return int(float(match.group(1)) * 72), int(float(match.group(2)) * 72)


class PdfConverter:
    """Converts, optimises and prints documents with external tools."""

    def __init__(self, options: Optional[FillOptions] = None):
        self.options = options or FillOptions()

    def _run(self, command: List[str], action: str) -> subprocess.CompletedProcess:
        logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise ConversionError(
                f"{action} failed: cannot run {command[0]}: {e}",
                command=" ".join(command), cause=e
            ) from e

        if result.returncode != 0:
            raise ConversionError(
                f"{action} failed (exit={result.returncode}): {result.stderr.strip()}",
                command=" ".join(command), stderr=result.stderr,
            )
        return result

    def convert_to_pdf(self, odt_path: Path) -> Path:
        """
        Convert an ODT file to PDF next to it.

        Args:
            odt_path: Filled document

        Returns:
            Path of the PDF

        Raises:
            ConversionError: If LibreOffice fails or produces no PDF
        """
        odt_path = Path(odt_path)
        out_dir = odt_path.parent if str(odt_path.parent) else Path(".")
        self._run(
            [
                self.options.soffice_path,
                "--headless",
                "--convert-to",
                "pdf",
                "--outdir",
                str(out_dir),
                str(odt_path),
            ],
            "PDF conversion",
        )

        pdf_path = odt_path.with_suffix(".pdf")
        if not pdf_path.is_file():
            raise ConversionError(
                f"PDF conversion produced no file: {pdf_path}", command=self.options.soffice_path
            )
        logger.info(f"PDF ready: {pdf_path}")
        return pdf_path

    def optimize_pdf(self, pdf_path: Path) -> Path:
        """
        Rewrite a PDF in place with Ghostscript's ``/screen`` settings.

        Raises:
            ConversionError: If Ghostscript fails
        """
        pdf_path = Path(pdf_path)
        optimized_path = pdf_path.with_name(f"{pdf_path.stem}_optimized.pdf")
        self._run(
            [
                self.options.ghostscript_path,
                "-dNOPAUSE",
                "-dBATCH",
                "-sDEVICE=pdfwrite",
                "-dCompatibilityLevel=1.4",
                "-dPDFSETTINGS=/screen",
                f"-sOutputFile={optimized_path}",
                str(pdf_path),
            ],
            "PDF optimisation",
        )
        if not optimized_path.is_file():
            raise ConversionError(
                f"Ghostscript produced no file: {optimized_path}", command=self.options.ghostscript_path
            )

        os.replace(optimized_path, pdf_path)
        logger.info(f"Thermal-optimised PDF ready: {pdf_path}")
        return pdf_path

    def print_command(self, pdf_path: Path, printer_name: str, thermal: bool) -> List[str]:
        """Command line sending ``pdf_path`` to ``printer_name``."""
        if not thermal:
            return [self.options.soffice_path, "--headless", "--pt", printer_name, str(pdf_path)]

        width, height = paper_size_points(self.options.thermal_paper_size)
        if os.name == "nt":
            device = "-sDEVICE=mswinpr2"
            output = f"-sOutputFile=\\\\spool\\{printer_name}"
        else:
            device = "-sDEVICE=pdfwrite"
            output = f"-sOutputFile=%pipe%lp -d {printer_name}"
        return [
            self.options.ghostscript_path,
            "-dPrinted",
            "-dNOPAUSE",
            "-dBATCH",
            device,
            "-sPAPERSIZE=custom",
            f"-dDEVICEWIDTHPOINTS={width}",
            f"-dDEVICEHEIGHTPOINTS={height}",
            output,
            str(pdf_path),
        ]

    def print_pdf(self, pdf_path: Path, printer_name: str, thermal: bool = False) -> None:
        """
        Send a PDF to a printer.

        Raises:
            ConversionError: If the print command fails
        """
        self._run(self.print_command(Path(pdf_path), printer_name, thermal), "Printing")
        logger.info(f"PDF sent to printer {printer_name!r}")
