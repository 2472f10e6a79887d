"""Tests for the command-line entry point."""

import json

import pytest

from main import main, parse_arguments


@pytest.fixture
def invoice_dir(tmp_path, compact_invoice, catalog_rows):
    (tmp_path / "invoices").mkdir()
    (tmp_path / "invoices" / "ICDC_0606.txt").write_text(compact_invoice, encoding="utf-8")
    (tmp_path / "catalog.json").write_text(json.dumps(catalog_rows), encoding="utf-8")
    return tmp_path


class TestArguments:

    def test_defaults(self):
        args = parse_arguments(["--input", "ICDC.pdf"])

        assert args.input == "ICDC.pdf"
        assert args.catalog is None
        assert not args.excel and not args.json and not args.evaluate

    def test_input_is_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])


class TestMain:

    def test_prints_json_result(self, invoice_dir, capsys):
        code = main([
            "--input", str(invoice_dir / "invoices" / "ICDC_0606.txt"),
            "--catalog", str(invoice_dir / "catalog.json"),
            "--quiet",
        ])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data['invoice_number'] == "ICDC010706250123456"
        assert data['source_file'] == "ICDC_0606.txt"
        assert [i['brand_match']['master_brand_id'] for i in data['items']] == [1, 2]

    def test_exports(self, invoice_dir):
        out_dir = invoice_dir / "out"
        code = main([
            "--input", str(invoice_dir / "invoices"),
            "--output", str(out_dir),
            "--excel", "--json", "--quiet",
        ])

        assert code == 0
        assert (out_dir / "icdc_ICDC010706250123456.xlsx").exists()
        assert (out_dir / "diagnostics" / "ICDC010706250123456.json").exists()

    def test_rejected_document_exit_code(self, tmp_path, no_product_text):
        path = tmp_path / "empty_invoice.txt"
        path.write_text(no_product_text, encoding="utf-8")

        assert main(["--input", str(path), "--quiet"]) == 1

    def test_missing_input(self, tmp_path, capsys):
        assert main(["--input", str(tmp_path / "absent.pdf"), "--quiet"]) == 1
        assert "Input path not found" in capsys.readouterr().err

    def test_bad_catalog(self, invoice_dir, capsys):
        (invoice_dir / "catalog.json").write_text("{", encoding="utf-8")
        code = main([
            "--input", str(invoice_dir / "invoices"),
            "--catalog", str(invoice_dir / "catalog.json"),
            "--quiet",
        ])

        assert code == 1
        assert "Configuration error" in capsys.readouterr().err
