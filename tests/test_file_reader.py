"""
File Reader Tests
=================
"""

import io
import json

import pandas as pd
import pytest

from fieldmap.exceptions import FileDecodeError, UnsupportedFileTypeError
from fieldmap.utils.file_reader import read_tabular


class TestReadTabular:
    def test_csv_keeps_raw_strings(self, sales_csv):
        rows, columns = read_tabular("sales.csv", sales_csv)
        assert columns[0] == "Order ID"
        assert len(rows) == 5
        assert rows[0]["Total Amount"] == "$100.00"
        assert rows[0]["Quantity"] == "2"

    def test_semicolon_delimiter(self):
        rows, columns = read_tabular("data.csv", b"Revenue;Store\n10;A\n20;B\n")
        assert columns == ["Revenue", "Store"]
        assert rows[1] == {"Revenue": "20", "Store": "B"}

    def test_missing_cells_become_none(self):
        rows, _ = read_tabular("data.csv", b"a,b\n1,\n")
        assert rows == [{"a": "1", "b": None}]

    def test_tsv(self):
        rows, columns = read_tabular("data.tsv", b"a\tb\n1\t2\n")
        assert columns == ["a", "b"]

    def test_json_records(self):
        payload = json.dumps([{"Revenue": 10, "Store": {"name": "A"}}]).encode()
        rows, columns = read_tabular("data.json", payload)
        assert columns == ["Revenue", "Store.name"]
        assert rows[0]["Revenue"] == 10

    def test_json_data_envelope(self):
        payload = json.dumps({"data": [{"a": 1}, {"a": 2}]}).encode()
        rows, _ = read_tabular("data.json", payload)
        assert [r["a"] for r in rows] == [1, 2]

    def test_invalid_json(self):
        with pytest.raises(FileDecodeError):
            read_tabular("data.json", b"{not json")

    def test_json_must_hold_records(self):
        with pytest.raises(FileDecodeError):
            read_tabular("data.json", b'{"rows": 3}')

    def test_excel(self):
        buffer = io.BytesIO()
        pd.DataFrame({"Revenue": [10.5, 20.0], "Store": ["A", "B"]}).to_excel(buffer, index=False)
        rows, columns = read_tabular("data.xlsx", buffer.getvalue())
        assert columns == ["Revenue", "Store"]
        assert rows[0]["Revenue"] == 10.5

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedFileTypeError):
            read_tabular("report.pdf", b"%PDF")

    def test_legacy_xls_rejected(self):
        with pytest.raises(UnsupportedFileTypeError):
            read_tabular("legacy.xls", b"\xd0\xcf\x11\xe0")

    def test_empty_file(self):
        assert read_tabular("empty.csv", b"") == ([], [])
