"""Tests for bandwidth string parsing."""
import pytest

from iobench.core.errors import SpeedParseError
from iobench.core.speed import (
    format_speed,
    normalize,
    parse_sample,
    parse_speed,
    require_speed,
)
from iobench.models.bench import SpeedSample


class TestParseSpeed:
    """Unit conversion onto MB/s."""

    def test_megabytes(self):
        assert parse_speed("96.9 MB/s") == 96.9

    def test_kilobytes_divide_by_1024(self):
        assert parse_speed("302kB/s") == 302 / 1024
        assert parse_speed("302kB/s") == pytest.approx(0.295, abs=1e-3)

    def test_gigabytes_multiply_by_1024(self):
        assert parse_speed("2.1 GB/s") == pytest.approx(2150.4)

    def test_binary_prefixes_share_the_scale(self):
        assert parse_speed("31.6MiB/s") == 31.6
        assert parse_speed("512KiB/s") == 0.5
        assert parse_speed("1.5GiB/s") == 1536.0

    def test_terabytes(self):
        assert parse_speed("1 TB/s") == 1024 * 1024
        assert parse_speed("2TiB/s") == 2 * 1024 * 1024

    def test_uppercase_kilo_from_old_fio(self):
        assert parse_speed("aggrb=2048KB/s") == 2.0

    def test_surrounding_punctuation(self):
        assert parse_speed("(1.2GiB/s)") == pytest.approx(1228.8)
        assert parse_speed("  , 96.9 MB/s,  ") == 96.9
        assert parse_speed("bw=3215KiB/s (3292kB/s),") == pytest.approx(3215 / 1024)

    def test_first_rate_wins(self):
        line = "1073741824 bytes (1.1 GB, 1.0 GiB) copied, 11.0817 s, 96.9 MB/s"
        assert parse_speed(line) == 96.9

    def test_measured_zero_is_not_missing(self):
        assert parse_speed("0 MB/s") == 0.0
        assert parse_speed("0 MB/s") is not None

    @pytest.mark.parametrize("text", ["", None, "garbage", "MB/s", "96.9", "96.9 mb/s", "12 bytes/s"])
    def test_unparseable_returns_none(self, text):
        assert parse_speed(text) is None


class TestSamples:
    """Raw token extraction and normalization."""

    def test_parse_sample(self):
        assert parse_sample("(1.2GiB/s)") == SpeedSample(value=1.2, unit="GiB/s")

    def test_normalize_is_identity_for_mb(self):
        sample = SpeedSample(value=123.456, unit="MB/s")
        assert normalize(sample) == 123.456
        assert normalize(SpeedSample(value=normalize(sample), unit="MB/s")) == 123.456

    def test_normalize_unknown_unit(self):
        with pytest.raises(KeyError):
            normalize(SpeedSample(value=1.0, unit="PB/s"))


class TestRequireSpeed:
    """Signaled parse failures."""

    def test_returns_speed(self):
        assert require_speed("96.9 MB/s", "dd") == 96.9

    def test_raises_with_source(self):
        with pytest.raises(SpeedParseError) as exc_info:
            require_speed("dd: error writing", "dd")

        assert exc_info.value.source == "dd"
        assert "dd" in str(exc_info.value)


def test_format_speed():
    assert format_speed(96.9) == "96.90"
    assert format_speed(0.0) == "0.00"
    assert format_speed(None) == "N/A"
