"""
Tests for the odtfill command line.
"""

import json
import pytest
from unittest.mock import patch

from odtfill.cli import create_parser, main
from odtfill.utils.exceptions import ConversionError


@pytest.fixture
def data_file(temp_dir):
    path = temp_dir / "data.json"
    path.write_text(json.dumps({"name": "Acme"}), encoding="utf-8")
    return path


@pytest.fixture
def template(make_odt):
    return make_odt("<text:p>@@name @@missing</text:p>")


def fake_pdf(odt_path):
    pdf = odt_path.with_suffix(".pdf")
    pdf.write_bytes(b"%PDF-1.4")
    return pdf


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        """Test default option values."""
        args = create_parser().parse_args(["--template", "t.odt"])

        assert args.image_workers == 1
        assert args.timeout == 30.0
        assert args.paper_size == "4x6"
        assert args.novalue is None
        assert not args.pdf

    def test_json_and_xml_are_exclusive(self):
        """Test that only one data source is accepted."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--json", "a.json", "--xml", "a.xml"])

    def test_version(self, capsys):
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "odtfill" in capsys.readouterr().out


class TestFillCommand:
    """Test filling from the command line."""

    def test_fill(self, template, data_file, temp_dir, read_odt_part):
        """Test a plain fill run."""
        code = main(["--template", str(template), "--json", str(data_file), "--destfile", str(temp_dir / "out")])

        assert code == 0
        assert "<text:p>Acme @@missing</text:p>" in read_odt_part(temp_dir / "out.odt")

    def test_novalue(self, template, data_file, temp_dir, read_odt_part):
        """Test the fallback for unresolved placeholders."""
        code = main([
            "--template", str(template), "--json", str(data_file),
            "--destfile", str(temp_dir / "out.odt"), "--novalue", "N/A",
        ])

        assert code == 0
        assert "<text:p>Acme N/A</text:p>" in read_odt_part(temp_dir / "out.odt")

    def test_xml_data(self, template, temp_dir, read_odt_part):
        """Test filling from XML data."""
        data = temp_dir / "data.xml"
        data.write_text("<data><name>Acme</name></data>", encoding="utf-8")

        code = main(["--template", str(template), "--xml", str(data), "--destfile", str(temp_dir / "out.odt")])

        assert code == 0
        assert "Acme" in read_odt_part(temp_dir / "out.odt")

    def test_missing_arguments(self, template):
        """Test that data and destination are required."""
        assert main(["--template", str(template)]) == 2
        assert main(["--json", "data.json", "--destfile", "out.odt"]) == 2

    def test_template_extension(self, data_file, temp_dir):
        """Test that the template must be an .odt file."""
        code = main(["--template", "t.docx", "--json", str(data_file), "--destfile", str(temp_dir / "o.odt")])

        assert code == 2

    def test_existing_destination(self, template, data_file, temp_dir):
        """Test that an existing destination fails without --overwrite."""
        (temp_dir / "out.odt").write_bytes(b"keep")
        argv = ["--template", str(template), "--json", str(data_file), "--destfile", str(temp_dir / "out.odt")]

        assert main(argv) == 1
        assert (temp_dir / "out.odt").read_bytes() == b"keep"
        assert main(argv + ["--overwrite"]) == 0

    def test_missing_data_file(self, template, temp_dir):
        """Test that unreadable data is an error."""
        code = main([
            "--template", str(template), "--json", str(temp_dir / "missing.json"),
            "--destfile", str(temp_dir / "out.odt"),
        ])

        assert code == 1


class TestPdfAndPrint:
    """Test PDF conversion and printing from the command line."""

    def test_pdf_replaces_odt(self, template, data_file, temp_dir):
        """Test that a successful conversion leaves only the PDF."""
        with patch("odtfill.cli.PdfConverter") as converter_cls:
            converter_cls.return_value.convert_to_pdf.side_effect = fake_pdf
            code = main([
                "--template", str(template), "--json", str(data_file),
                "--destfile", str(temp_dir / "out.odt"), "--pdf",
            ])

        assert code == 0
        assert (temp_dir / "out.pdf").exists()
        assert not (temp_dir / "out.odt").exists()
        converter_cls.return_value.print_pdf.assert_not_called()

    def test_pdf_failure_keeps_odt(self, template, data_file, temp_dir):
        """Test that a failed conversion keeps the ODT."""
        with patch("odtfill.cli.PdfConverter") as converter_cls:
            converter_cls.return_value.convert_to_pdf.side_effect = ConversionError("soffice missing")
            code = main([
                "--template", str(template), "--json", str(data_file),
                "--destfile", str(temp_dir / "out.odt"), "--pdf",
            ])

        assert code == 1
        assert (temp_dir / "out.odt").exists()

    def test_thermal_print(self, template, data_file, temp_dir):
        """Test that thermal printers get an optimised PDF."""
        with patch("odtfill.cli.PdfConverter") as converter_cls, \
                patch("odtfill.cli.is_thermal_printer", return_value=True):
            converter = converter_cls.return_value
            converter.convert_to_pdf.side_effect = fake_pdf
            code = main([
                "--template", str(template), "--json", str(data_file),
                "--destfile", str(temp_dir / "out.odt"), "--print", "Zebra ZD420",
            ])

        assert code == 0
        converter.optimize_pdf.assert_called_once_with(temp_dir / "out.pdf")
        converter.print_pdf.assert_called_once_with(temp_dir / "out.pdf", "Zebra ZD420", thermal=True)

    def test_optimisation_failure_still_prints(self, template, data_file, temp_dir):
        """Test that a Ghostscript failure does not stop printing."""
        with patch("odtfill.cli.PdfConverter") as converter_cls, \
                patch("odtfill.cli.is_thermal_printer", return_value=True):
            converter = converter_cls.return_value
            converter.convert_to_pdf.side_effect = fake_pdf
            converter.optimize_pdf.side_effect = ConversionError("gs missing")
            code = main([
                "--template", str(template), "--json", str(data_file),
                "--destfile", str(temp_dir / "out.odt"), "--print", "Zebra ZD420",
            ])

        assert code == 0
        converter.print_pdf.assert_called_once()

    def test_print_failure(self, template, data_file, temp_dir):
        """Test that a failed print is reported."""
        with patch("odtfill.cli.PdfConverter") as converter_cls, \
                patch("odtfill.cli.is_thermal_printer", return_value=False):
            converter = converter_cls.return_value
            converter.convert_to_pdf.side_effect = fake_pdf
            converter.print_pdf.side_effect = ConversionError("no such printer")
            code = main([
                "--template", str(template), "--json", str(data_file),
                "--destfile", str(temp_dir / "out.odt"), "--print", "HP",
            ])

        assert code == 1
        converter.optimize_pdf.assert_not_called()


class TestOtherCommands:
    """Test --sanitize and --list-placeholders."""

    def test_sanitize(self, make_odt, read_odt_part):
        """Test sanitizing a template in place."""
        path = make_odt(
            '<text:p><text:span text:style-name="T1">@@na</text:span>me</text:p>',
            automatic_styles='<style:style style:name="T1" style:family="text"><style:text-properties/></style:style>',
        )

        assert main(["--template", str(path), "--sanitize"]) == 0
        assert "<text:p>@@name</text:p>" in read_odt_part(path)

    def test_list_placeholders(self, template):
        """Test listing placeholders."""
        assert main(["--template", str(template), "--list-placeholders"]) == 0

    def test_missing_template(self):
        """Test that --template is required."""
        assert main(["--sanitize"]) == 2
