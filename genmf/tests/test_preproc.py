"""Tests for preprocessing flag groups and replacement maps."""
from genmf.core.preproc import (
    preproc_replacements,
    split_preproc_flags,
    sub_make_args,
)
from genmf.policy.recipe import Recipe


class TestSplitPreprocFlags:

    def test_groups(self):
        out = split_preproc_flags([
            "-includes", "-IC:\\inc", "-DX",
            "-make-args", "V=1", "-k",
        ])
        assert out.compiler_flags == ["-I/c/inc", "-DX"]
        assert out.make_args == ["V=1", "-k"]

    def test_flags_before_marker_are_compiler_flags(self):
        out = split_preproc_flags(["-DA", "-make-args", "X=1", "-includes", "-DB"])
        assert out.compiler_flags == ["-DA", "-DB"]
        assert out.make_args == ["X=1"]

    def test_each_flag_once(self):
        out = split_preproc_flags(["-includes", "-DX"])
        assert out.compiler_flags == ["-DX"]

    def test_empty(self):
        out = split_preproc_flags([])
        assert out.compiler_flags == [] and out.make_args == []


def test_sub_make_args():
    args = sub_make_args("C:\\build", Recipe.PREPROC_MACROS, ["V=1"])
    assert args == ["-s", "-C", "/c/build", "V=1", "preproc.macros"]


class TestPreprocReplacements:

    def test_includes_pass(self):
        rep = preproc_replacements(
            Recipe.PREPROC_INCLUDES,
            system_path="C:\\sys", variant_path="/v",
            source="C:\\b\\s.cpp", target="/b/out.txt",
            compiler_flags=["-I/c/inc", "-DX"],
        )
        assert rep == {
            "ARDUINO_SYSTEM_PATH": "/c/sys",
            "ARDUINO_VARIANT_PATH": "/v",
            "ARDUINO_PREPROC_INCLUDES_FLAGS": "\t-I/c/inc -DX",
            "ARDUINO_PREPROC_INCLUDES_SOURCE": "\t/c/b/s.cpp",
            "ARDUINO_PREPROC_INCLUDES_OUTFILE": "\t/b/out.txt",
        }

    def test_macros_pass_keeps_includes_keys(self):
        base = {"ARDUINO_PREPROC_INCLUDES_FLAGS": "\t-Ia"}
        rep = preproc_replacements(
            Recipe.PREPROC_MACROS,
            system_path="", variant_path="", source="s", target="t",
            compiler_flags=[], base=base,
        )
        assert rep["ARDUINO_PREPROC_INCLUDES_FLAGS"] == "\t-Ia"
        assert rep["ARDUINO_PREPROC_MACROS_SOURCE"] == "\ts"
        assert "ARDUINO_PREPROC_MACROS_FLAGS" in rep
        assert base == {"ARDUINO_PREPROC_INCLUDES_FLAGS": "\t-Ia"}
