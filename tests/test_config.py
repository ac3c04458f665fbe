"""Tests for configuration."""

import os

from treebind.config import Config, Mode, get_config, reset_config, set_config


class TestEnvironment:
    """Test values read from environment variables."""

    def test_defaults(self):
        """Test defaults with no variables set."""
        config = Config()
        assert config.mode is Mode.C
        assert config.include_dirs == []
        assert config.dynlib is None
        assert config.cache_dir.endswith("treebind")
        assert config.fetch_timeout == 30.0

    def test_variables(self, monkeypatch, tmp_path):
        """Test that every variable is honoured."""
        monkeypatch.setenv("TREEBIND_MODE", "CPP")
        monkeypatch.setenv("TREEBIND_INCLUDE_DIRS", os.pathsep.join([str(tmp_path / "a"), str(tmp_path / "b")]))
        monkeypatch.setenv("TREEBIND_DYNLIB", "libdemo.so")
        monkeypatch.setenv("TREEBIND_CACHE_DIR", str(tmp_path / "cache"))
        monkeypatch.setenv("TREEBIND_FETCH_TIMEOUT", "5")

        config = Config()
        assert config.mode is Mode.CPP
        assert config.include_dirs == [str(tmp_path / "a"), str(tmp_path / "b")]
        assert config.dynlib == "libdemo.so"
        assert config.cache_dir == str(tmp_path / "cache")
        assert config.fetch_timeout == 5.0

    def test_unknown_mode_falls_back(self, monkeypatch):
        """Test that an unknown mode means C."""
        monkeypatch.setenv("TREEBIND_MODE", "fortran")
        assert Config().mode is Mode.C

    def test_global_instance(self):
        """Test get/set/reset of the global config."""
        config = Config(dynlib="x.so")
        set_config(config)
        assert get_config() is config
        reset_config()
        assert get_config() is not config


class TestModes:
    """Test language mode selection by file extension."""

    def test_extensions(self):
        """Test C and C++ extensions."""
        config = Config(mode=Mode.C)
        assert config.mode_for("a.h") is Mode.C
        assert config.mode_for("a.hpp") is Mode.CPP
        assert config.mode_for("a.hh") is Mode.CPP
        assert config.mode_for("a.cpp") is Mode.CPP

    def test_unknown_extension(self):
        """Test that unknown extensions use the configured mode."""
        assert Config(mode=Mode.CPP).mode_for("a.inc") is Mode.CPP
        assert Config(mode=Mode.C).mode_for("a.inc") is Mode.C


class TestFindHeader:
    """Test header lookup."""

    def test_direct_path(self, tmp_path):
        """Test that an existing path is returned as is."""
        header = tmp_path / "x.h"
        header.write_text("")
        assert Config().find_header(header) == header

    def test_include_dir(self, tmp_path):
        """Test lookup relative to an include directory."""
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "x.h").write_text("")
        config = Config(include_dirs=[str(tmp_path)])
        assert config.find_header("sub/x.h") == tmp_path / "sub" / "x.h"

    def test_shortest_match(self, tmp_path):
        """Test that a recursive search prefers the shortest path."""
        deep = tmp_path / "a" / "very" / "deep"
        deep.mkdir(parents=True)
        (deep / "x.h").write_text("")
        (tmp_path / "a" / "x.h").write_text("")
        config = Config(include_dirs=[str(tmp_path)])
        assert config.find_header("x.h") == tmp_path / "a" / "x.h"

    def test_not_found(self, tmp_path):
        """Test that a missing header gives None."""
        assert Config(include_dirs=[str(tmp_path)]).find_header("missing.h") is None

    def test_add_include_dir(self, tmp_path):
        """Test that include dirs are added once."""
        config = Config()
        config.add_include_dir(tmp_path)
        config.add_include_dir(tmp_path)
        assert config.include_dirs == [str(tmp_path.resolve())]
