"""Tests for argument parsing and formatting helpers."""

import pytest

from osu_volume_helper import utils


class TestParseVolume:
    @pytest.mark.parametrize("val,expected", [("5", 5), ("0", 0), ("100", 100), ("20%", 20), (" 7 ", 7), ("-1", -1)])
    def test_valid(self, val: str, expected: int) -> None:
        assert utils.parse_volume(val) == expected

    @pytest.mark.parametrize("val", ["", "loud", "5.5", "1/2"])
    def test_invalid(self, val: str) -> None:
        with pytest.raises(ValueError):
            utils.parse_volume(val)


class TestPretty:
    def test_point(self) -> None:
        assert utils.pretty_point((61500, 30)) == "1:01.500 @ 30%"

    def test_negative_point(self) -> None:
        assert utils.pretty_point((-30, 5)) == "-0:00.030 @ 5%"

    def test_list(self) -> None:
        assert utils.pretty_list([]) == ""
        assert utils.pretty_list(["Easy"]) == "Easy"
        assert utils.pretty_list(["Easy", "Normal", "Insane"]) == "Easy, Normal and Insane"
