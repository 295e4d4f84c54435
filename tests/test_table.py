"""Table construction, lookup, typed bulk operations, column management and statistics"""
import math
import pytest
from py_frame import Column, DataType, Table
from py_frame.errors import (
    PyFrameIndexError,
    PyFrameKeyError,
    PyFrameLengthError,
    PyFrameNameError,
    PyFrameTypeError,
    PyFrameValueError,
    UnsupportedColumnWarning,
)


@pytest.fixture
def table():
    return Table({
        "a": [1, 2, 3],
        "b": [1.5, 2.5, 3.5],
        "s": ["x", "y", "z"],
        "c": [10, 20, 30],
    })


class TestConstruction:

    def test_from_dict(self, table):
        assert table.shape == (3, 4)
        assert len(table) == 3
        assert table.column_names() == ["a", "b", "s", "c"]
        assert table.dtypes() == {
            "a": DataType.I64,
            "b": DataType.F64,
            "s": DataType.STRING,
            "c": DataType.I64,
        }

    def test_empty(self):
        t = Table()
        assert t.shape == (0, 0)
        assert t.column_names() == []

    def test_unequal_lengths(self):
        with pytest.raises(PyFrameLengthError):
            Table({"a": [1, 2], "b": [1, 2, 3]})

    def test_dict_with_column_values_uses_key(self):
        t = Table({"a": Column([1, 2], name="other")})
        assert t.column_names() == ["a"]
        assert t["a"].name == "a"

    def test_from_list_of_columns(self):
        t = Table([Column([1], name="a"), Column([2], name="a")])
        assert t.column_names() == ["a", "1"]

    def test_list_of_non_columns(self):
        with pytest.raises(PyFrameTypeError):
            Table([[1, 2], [3, 4]])

    def test_constructor_copies_columns(self):
        c = Column([1, 2], name="a")
        t = Table([c])
        c[0] = 99
        assert t["a"].to_list() == [1, 2]

    def test_first_column_labels(self):
        t = Table([Column([1, 2], name="a", index=["x", "y"])])
        assert t.index == ["x", "y"]

    def test_from_dict_sorted(self):
        t = Table.from_dict({"b": [1], "a": [2]}, sort_keys=True)
        assert t.column_names() == ["a", "b"]

    def test_from_rows(self):
        t = Table.from_rows([[1, "x"], [2, "y"]])
        assert t.column_names() == ["0", "1"]
        assert t["0"].to_list() == [1, 2]
        assert t.dtypes()["1"] is DataType.STRING

    def test_from_rows_ragged(self):
        with pytest.raises(PyFrameLengthError):
            Table.from_rows([[1, 2], [3]])

    def test_from_columns(self):
        t = Table.from_columns([Column([1], name="a"), Column([2], name="b")], preserve_names=False)
        assert t.column_names() == ["0", "1"]

    def test_unsupported_column_dropped(self):
        with pytest.warns(UnsupportedColumnWarning):
            t = Table({"a": [1, 2], "o": [None, None]})
        assert t.column_names() == ["a"]


class TestLookup:

    def test_getitem_returns_copy(self, table):
        col = table["a"]
        col[0] = 100
        assert table["a"][0] == 1

    def test_getitem_missing(self, table):
        with pytest.raises(PyFrameKeyError):
            table["nope"]

    def test_getitem_list_selects(self, table):
        sub = table[["c", "a"]]
        assert sub.column_names() == ["c", "a"]

    def test_getitem_bad_key(self, table):
        with pytest.raises(PyFrameTypeError):
            table[0]

    def test_get(self, table):
        assert table.get("a", DataType.I64).to_list() == [1, 2, 3]
        assert table.get("a", DataType.F64) is None
        assert table.get("missing", DataType.I64) is None

    def test_column_with_dtype(self, table):
        assert table.column("b", DataType.F64).to_list() == [1.5, 2.5, 3.5]
        with pytest.raises(PyFrameTypeError):
            table.column("b", DataType.I64)

    def test_attribute_access(self):
        t = Table({"Unit Price": [1.0], "class": [2]})
        assert t.unit_price.to_list() == [1.0]
        assert t.class_.to_list() == [2]
        assert "unit_price" in dir(t)
        with pytest.raises(AttributeError):
            t.nothing_here

    def test_contains(self, table):
        assert "a" in table
        assert "q" not in table

    def test_at(self, table):
        assert table.at("c", "1") == 20
        with pytest.raises(PyFrameKeyError):
            table.at("c", "99")

    def test_columns_are_copies(self, table):
        cols = table.columns()
        assert [c.name for c in cols] == ["a", "b", "s", "c"]
        cols[0][0] = 100
        assert table["a"][0] == 1


class TestRows:

    def test_iteration(self, table):
        rows = list(table)
        assert len(rows) == 3
        first = rows[0]
        assert first.label == "0"
        assert first.a == 1
        assert first["s"] == "x"
        assert first[1] == 1.5
        assert list(first) == [1, 1.5, "x", 10]
        assert len(first) == 4
        assert first.to_dict() == {"a": 1, "b": 1.5, "s": "x", "c": 10}

    def test_row_missing_column(self, table):
        row = next(iter(table))
        with pytest.raises(PyFrameKeyError):
            row["nope"]
        with pytest.raises(AttributeError):
            row.nope

    def test_row_repr(self):
        row = next(iter(Table({"a": [1], "s": ["x"]})))
        assert repr(row) == "Row(0: 1, 'x')"


class TestTypedBulk:

    def test_apply_columns(self, table):
        out = table.apply(DataType.I64, sum)
        assert out.to_list() == [6, 60]
        assert out.index == ["a", "c"]

    def test_apply_rows(self, table):
        out = table.apply(DataType.I64, sum, axis="rows")
        assert out.to_list() == [11, 22, 33]

    def test_apply_absent_dtype(self, table):
        assert table.apply(DataType.BOOL, sum) is None

    def test_apply_map_keeps_other_columns(self, table):
        out = table.apply_map(DataType.I64, lambda x: x + 1)
        assert out.column_names() == ["a", "b", "s", "c"]
        assert out["a"].to_list() == [2, 3, 4]
        assert out["c"].to_list() == [11, 21, 31]
        assert out["b"].to_list() == [1.5, 2.5, 3.5]
        assert table["a"].to_list() == [1, 2, 3]

    def test_par_apply_map_matches_sequential(self, table):
        seq = table.apply_map(DataType.I64, lambda x: x * 3)
        par = table.par_apply_map(DataType.I64, lambda x: x * 3, max_workers=2)
        for name in seq.column_names():
            assert par[name] == seq[name]

    def test_apply_map_inplace(self, table):
        table.apply_map_inplace(DataType.F64, lambda x: x * 2)
        assert table["b"].to_list() == [3.0, 5.0, 7.0]

    def test_transform_returns_only_transformed(self, table):
        out = table.transform(DataType.I64, lambda values: [v / 10 for v in values])
        assert out.column_names() == ["a", "c"]
        assert out.dtypes()["a"] is DataType.F64
        assert out["c"].to_list() == [1.0, 2.0, 3.0]

    def test_transform_rows(self, table):
        out = table.transform(DataType.I64, lambda row: [row[1], row[0]], axis="rows")
        assert out["a"].to_list() == [10, 20, 30]

    def test_transform_parallel(self, table):
        out = table.transform(DataType.I64, sorted, parallel=True)
        assert out["a"].to_list() == [1, 2, 3]

    def test_transform_absent_dtype(self, table):
        assert table.transform(DataType.BOOL, list) is None

    def test_transform_bad_axis(self, table):
        with pytest.raises(PyFrameValueError):
            table.transform(DataType.I64, list, axis="sideways")

    def test_mask(self, table):
        out = table.mask(DataType.I64, 0, lambda x: x >= 3)
        assert out["a"].to_list() == [1, 2, 0]
        assert out["c"].to_list() == [0, 0, 0]
        assert table["a"].to_list() == [1, 2, 3]

    def test_as_type(self, table):
        out = table.as_type(DataType.I64, DataType.F64)
        assert out.dtypes()["a"] is DataType.F64
        assert out.column_names() == ["a", "b", "s", "c"]
        assert out["c"].to_list() == [10.0, 20.0, 30.0]

    def test_as_type_narrowing(self, table):
        with pytest.raises(PyFrameTypeError):
            table.as_type(DataType.F64, DataType.I64)

    def test_to_matrix(self, table):
        assert table.to_matrix(DataType.I64) == [[1, 10], [2, 20], [3, 30]]
        assert table.to_matrix(DataType.BOOL) is None

    def test_assign(self, table):
        out = table.assign("a", "half", lambda x: x / 2)
        assert out["half"].to_list() == [0.5, 1.0, 1.5]
        assert "half" not in table

    def test_assign_inplace(self, table):
        name = table.assign_inplace("s", "loud", str.upper)
        assert name == "loud"
        assert table["loud"].to_list() == ["X", "Y", "Z"]

    def test_assign_missing_key(self, table):
        with pytest.raises(PyFrameKeyError):
            table.assign("nope", "x", lambda v: v)

    def test_assign_existing_name_is_renumbered(self, table):
        assert table.assign_inplace("a", "b", lambda x: x) == "4"

    def test_combine(self, table):
        other = Table({"a": [3, 2, 1], "b": [0.0, 0.0, 0.0], "z": [9, 9, 9]})
        out = table.combine(other, DataType.I64, max)
        assert out.column_names() == ["a"]
        assert out["a"].to_list() == [3, 2, 3]


class TestColumnManagement:

    def test_drop(self, table):
        out = table.drop_columns(["a", "s"])
        assert out.column_names() == ["b", "c"]
        assert table.column_names() == ["a", "b", "s", "c"]

    def test_drop_missing_is_atomic(self, table):
        with pytest.raises(PyFrameKeyError):
            table.drop_columns_inplace(["a", "nope"])
        assert table.column_names() == ["a", "b", "s", "c"]

    def test_drop_single_name(self, table):
        table.drop_columns_inplace("s")
        assert table.column_names() == ["a", "b", "c"]

    def test_pop(self, table):
        col = table.pop("s")
        assert col.to_list() == ["x", "y", "z"]
        assert table.column_names() == ["a", "b", "c"]
        with pytest.raises(PyFrameKeyError):
            table.pop("s")

    def test_column_at(self, table):
        assert table.column_at(1).name == "b"
        assert table.column_at(-1, DataType.I64).to_list() == [10, 20, 30]
        with pytest.raises(PyFrameIndexError):
            table.column_at(4)
        with pytest.raises(PyFrameTypeError):
            table.column_at(0, DataType.F64)

    def test_rename_column(self, table):
        table.rename_column("a", "alpha")
        assert table.column_names() == ["alpha", "b", "s", "c"]
        with pytest.raises(PyFrameNameError):
            table.rename_column("b", "c")

    def test_clone_is_deep(self, table):
        dup = table.clone()
        dup.apply_map_inplace(DataType.I64, lambda x: 0)
        dup.drop_columns_inplace("s")
        assert table["a"].to_list() == [1, 2, 3]
        assert "s" in table


class TestRowDrop:

    def test_drop_rows_by_label(self, table):
        out = table.drop(["0", "2"])
        assert out.shape == (1, 4)
        assert out.index == ["1"]
        assert out["s"].to_list() == ["y"]
        assert out["c"].to_list() == [20]
        assert table.shape == (3, 4)

    def test_drop_single_label(self):
        t = Table([Column([1, 2], name="a", index=["x", "y"]), Column([0.5, 1.5], name="f", index=["x", "y"])])
        out = t.drop("x")
        assert out.index == ["y"]
        assert out["f"].to_list() == [1.5]

    def test_drop_inplace_updates_length_and_labels(self, table):
        table.drop_inplace(["1"])
        assert len(table) == 2
        assert table.index == ["0", "2"]
        assert table["a"].to_list() == [1, 3]
        table.add_column(Column([7, 8], name="n"))
        assert table.shape == (2, 5)

    def test_drop_missing_label_leaves_table(self, table):
        with pytest.raises(PyFrameKeyError):
            table.drop_inplace(["0", "nope"])
        assert len(table) == 3
        assert table.index == ["0", "1", "2"]

    def test_drop_all_rows(self, table):
        out = table.drop(["0", "1", "2"])
        assert out.shape == (0, 4)


class TestColumnSummaries:

    def test_count_skips_nan(self):
        t = Table({"f": [1.0, math.nan, 3.0], "i": [1, 2, 3], "s": ["a", "b", "c"]})
        out = t.count()
        assert out.dtype is DataType.I64
        assert out.index == ["f", "i"]
        assert out.to_list() == [2, 3]

    def test_all_any(self):
        t = Table({"i": [0, 1], "f": [1.0, 2.0], "s": ["", "x"]})
        assert t.all().to_list() == [False, True]
        assert t.any().to_list() == [True, True]
        assert t.all().dtype is DataType.BOOL
        assert t.all(dtype=DataType.F64).index == ["f"]

    def test_cumulative(self):
        t = Table({"i": [3, 1, 2], "f": [1.0, math.nan, 2.0], "s": ["a", "b", "c"]})
        assert t.cum_sum().column_names() == ["i", "f"]
        assert t.cum_sum()["i"].to_list() == [3, 4, 6]
        assert t.cum_prod()["i"].to_list() == [3, 3, 6]
        assert t.cum_min()["i"].to_list() == [3, 1, 1]
        assert t.cum_max()["i"].to_list() == [3, 3, 3]
        running = t.cum_sum()["f"].to_list()
        assert math.isnan(running[1])
        assert running[2] == 3.0

    def test_cumulative_for_one_dtype(self):
        t = Table({"i": [1, 2], "f": [1.0, 2.0]})
        assert t.cum_sum(dtype=DataType.F64).column_names() == ["f"]


class TestStatistics:

    def test_sum_over_numeric_columns(self, table):
        out = table.sum()
        assert out.name == "sum"
        assert out.dtype is DataType.F64
        assert out.index == ["a", "b", "c"]
        assert out.to_list() == [6.0, 7.5, 60.0]

    def test_reduction_for_one_dtype(self, table):
        assert table.mean(dtype=DataType.F64).to_list() == [2.5]
        assert table.max(dtype=DataType.I64).to_list() == [3.0, 30.0]

    def test_non_numeric_dtype_rejected(self, table):
        with pytest.raises(PyFrameTypeError):
            table.mean(dtype=DataType.STRING)

    def test_spread(self, table):
        assert table.variance(dtype=DataType.I64).to_list() == pytest.approx([1.0, 100.0])
        assert table.stdev(dtype=DataType.I64).to_list() == pytest.approx([1.0, 10.0])

    def test_quantile(self, table):
        assert table.quantile(0.5).to_list() == [2.0, 2.5, 20.0]

    def test_central_moment(self, table):
        assert table.central_moment(2, dtype=DataType.I64).to_list() == pytest.approx([2 / 3, 200 / 3])

    def test_corr(self, table):
        out = table.corr()
        assert out.shape == (3, 3)
        assert out.column_names() == ["a", "b", "c"]
        assert out.index == ["a", "b", "c"]
        for name in out.column_names():
            assert out[name].to_list() == pytest.approx([1.0, 1.0, 1.0])

    def test_cov(self):
        t = Table({"x": [1.0, 2.0, 3.0], "y": [3.0, 2.0, 1.0]})
        out = t.cov()
        assert out.at("x", "y") == pytest.approx(-1.0)
        assert out.at("x", "x") == pytest.approx(1.0)

    def test_describe(self, table):
        out = table.describe()
        assert out.column_names() == ["a", "b", "c"]
        assert out.shape == (9, 3)
        assert out.at("a", "mean") == 2.0
        assert out.at("c", "count") == 3.0

    def test_describe_skips_nan(self):
        t = Table({"f": [1.0, math.nan, 3.0]})
        assert t.describe().at("f", "count") == 2.0
