"""Text and HTML rendering of tables and columns"""
import io
import pytest
from py_frame import Column, DataType, Table, float32
from py_frame.display import format_value, preview_positions
from py_frame.errors import PyFrameIndexError


class TestFormatValue:

    def test_float_precision(self):
        assert format_value(1.5, DataType.F64) == "1.500"
        assert format_value(float32(2.25), DataType.F32) == "2.250"

    def test_nan(self):
        assert format_value(float("nan"), DataType.F64) == "NaN"

    def test_bool(self):
        assert format_value(True, DataType.BOOL) == "True"
        # bool storage holds 0/1
        assert format_value(0, DataType.BOOL) == "False"

    def test_long_string_truncated(self):
        assert format_value("x" * 40, DataType.STRING) == "x" * 27 + "..."
        assert format_value("x" * 30, DataType.STRING) == "x" * 30

    def test_int(self):
        assert format_value(-12, DataType.I64) == "-12"


class TestPreview:

    def test_short_tables_show_everything(self):
        assert preview_positions(10) == list(range(10))

    def test_long_tables_are_truncated(self):
        assert preview_positions(12) == [0, 1, 2, 3, 4, None, 7, 8, 9, 10, 11]


class TestTableText:

    def test_str(self):
        t = Table({"a": [1.5, 2.0]})
        assert str(t) == " " * 7 + "a\n0  1.500\n1  2.000"

    def test_left_aligned_text(self):
        t = Table({"b": [True, False]})
        assert str(t) == "   b\n0  True\n1  False"

    def test_ellipsis_row(self):
        t = Table({"a": list(range(12))})
        lines = str(t).splitlines()
        assert len(lines) == 12
        assert lines[6] == "...  ..."
        assert lines[-1].split() == ["11", "11"]

    def test_summary_line_for_large_tables(self):
        lines = str(Table({"a": list(range(50))})).splitlines()
        assert lines[-1] == "[50 rows x 1 columns]"
        assert lines[-2] == ""

    def test_no_summary_below_threshold(self):
        lines = str(Table({"a": list(range(49))})).splitlines()
        assert "rows x" not in lines[-1]

    def test_quoted_header(self):
        first = str(Table({" a": [1]})).splitlines()[0]
        assert "' a'" in first

    def test_repr_has_types_and_footer(self):
        lines = repr(Table({"a": [1, 2, 3], "s": ["x", "y", "z"]})).splitlines()
        assert lines[1].split() == ["<i64>", "<string>"]
        assert lines[-1] == "# 3×2 table <i64, string>"

    def test_repr_of_empty_table(self):
        assert repr(Table()).endswith("# 0×0 table")


class TestHeadTail:

    def test_head(self):
        buf = io.StringIO()
        Table({"a": [1, 2, 3]}).head(2, file=buf)
        assert buf.getvalue() == "   a\n0  1\n1  2\n"

    def test_tail(self):
        buf = io.StringIO()
        Table({"a": [1, 2, 3]}).tail(2, file=buf)
        assert buf.getvalue() == "   a\n1  2\n2  3\n"

    def test_head_never_summarises(self):
        buf = io.StringIO()
        Table({"a": list(range(60))}).head(3, file=buf)
        assert "rows x" not in buf.getvalue()

    def test_too_many_rows(self):
        t = Table({"a": [1, 2, 3]})
        with pytest.raises(PyFrameIndexError):
            t.head(4)
        with pytest.raises(PyFrameIndexError):
            t.tail(-1)


class TestHtml:

    def test_repr_html(self):
        out = Table({"a": [1, 2]})._repr_html_()
        assert out.startswith('<table class="py-frame">')
        assert "<th>i64</th>" in out
        assert out.endswith("<p>2 rows × 1 columns</p>")

    def test_head_html(self):
        out = Table({"a": [1, 2]}).head_html(1)
        assert "<tr><th>0</th><td>1</td></tr>" in out
        assert "<tr><th>1</th>" not in out

    def test_tail_html(self):
        out = Table({"a": [1, 2]}).tail_html(1)
        assert "<tr><th>1</th><td>2</td></tr>" in out

    def test_escaping(self):
        out = Table({"<b>": ["&"]}).head_html(1)
        assert "&lt;b&gt;" in out
        assert "<td>&amp;</td>" in out

    def test_ellipsis_row(self):
        out = Table({"a": list(range(12))})._repr_html_()
        assert "<tr><th>...</th><td>...</td></tr>" in out


class TestColumnText:

    def test_column_repr_footer(self):
        text = repr(Column([1.0, 2.0], name="v"))
        assert text.splitlines()[-1] == "# 2 element column <f64>"
        assert text.splitlines()[1] == "0  1.000"
