import pandas as pd
import pytest

from stratsel.data import ParquetCandleSource
from stratsel.data.source.base import higher_timeframe, timeframe_dir


def _write(path, rows, time_col="time"):
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = pd.DataFrame(rows, columns=[time_col, "open", "high", "low", "close", "volume"])
    frame.to_parquet(path, index=False)


DAY = 86_400
T0 = 1_704_067_200  # 2024-01-01 UTC


def test_loads_sorted_deduplicated_candles(tmp_path):
    _write(tmp_path / "1day" / "AAA.parquet", [
        (T0 + 2 * DAY, 12.0, 13.0, 11.0, 12.5, 300),
        (T0, 10.0, 11.0, 9.0, 10.5, 100),
        (T0 + DAY, 11.0, 12.0, 10.0, 11.5, 200),
        (T0 + DAY, 11.0, 12.0, 10.0, 11.8, 250),
    ])

    candles = ParquetCandleSource(str(tmp_path)).load_series("AAA", "1day")

    assert [c.close for c in candles] == [10.5, 11.8, 12.5]
    assert candles[0].timestamp == pd.Timestamp("2024-01-01")
    assert candles[1].volume == 250
    timestamps = [c.timestamp for c in candles]
    assert timestamps == sorted(timestamps)


def test_epoch_milliseconds(tmp_path):
    _write(tmp_path / "1hour" / "AAA.parquet", [
        (T0 * 1000, 10.0, 11.0, 9.0, 10.5, 100),
        (T0 * 1000 + 3_600_000, 10.5, 11.0, 10.0, 10.8, 100),
    ], time_col="timestamp")

    candles = ParquetCandleSource(str(tmp_path)).load_series("AAA", "1Hour")

    assert len(candles) == 2
    assert candles[1].timestamp == pd.Timestamp("2024-01-01 01:00:00")


def test_drops_invalid_rows(tmp_path):
    _write(tmp_path / "1day" / "AAA.parquet", [
        (T0, 10.0, 11.0, 9.0, 10.5, 100),
        (T0 + DAY, 10.0, 9.0, 11.0, 10.0, 100),  # high below low
        (T0 + 2 * DAY, 10.0, 11.0, 9.0, None, 100),
    ])

    candles = ParquetCandleSource(str(tmp_path)).load_series("AAA", "1day")
    assert [c.close for c in candles] == [10.5]


def test_missing_file_gives_empty_series(tmp_path, caplog):
    assert ParquetCandleSource(str(tmp_path)).load_series("AAA", "1day") == []
    assert "parquet not found" in caplog.text


def test_unreadable_file_gives_empty_series(tmp_path):
    path = tmp_path / "1day" / "AAA.parquet"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"not a parquet file")
    assert ParquetCandleSource(str(tmp_path)).load_series("AAA", "1day") == []


def test_invalid_symbol_or_timeframe(tmp_path):
    source = ParquetCandleSource(str(tmp_path))
    assert source.get_path("../etc", "1day") is None
    assert source.get_path("AAA", "2Min") is None
    assert source.load_series("AAA", "2Min") == []
    assert source.get_path("brk.b", "15Min") == tmp_path / "15min" / "BRK.B.parquet"


@pytest.mark.parametrize("label, folder", [
    ("15Min", "15min"),
    ("1Hour", "1hour"),
    ("4Hour", "4hour"),
    ("1day", "1day"),
    ("1week", "1week"),
])
def test_timeframe_dirs(label, folder):
    assert timeframe_dir(label) == folder


def test_higher_timeframe():
    assert higher_timeframe("15Min") == "1hour"
    assert higher_timeframe("1Hour") == "1day"
    assert higher_timeframe("1week") == "1day"
