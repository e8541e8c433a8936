"""Tests for argument parsing, configuration and the CLI entry point."""
import io
import logging
import pytest

from args import parse_args
from cli_config import build_config, load_config_file
from constants import Constants, ExclusionKeyMode, ExitCodes
from depfetch import iter_seeds, main, open_seed_source, run
from registry.maven.coordinates import Coordinate, InputError
from registry.maven.pom import parse_pom
from repo_fakes import BASE_URL, FakeRepository, dep_xml, pom_xml


class TestArgs:
    """Test CLI argument parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert args.INPUT_FILE is None
        assert args.OUTPUT_DIR is None
        assert args.ERROR_ON_WARNINGS is False

    def test_file_and_output(self):
        args = parse_args(["-f", "deps.txt", "-o", "out", "--exclusion-key", "LEGACY"])
        assert args.INPUT_FILE == "deps.txt"
        assert args.OUTPUT_DIR == "out"
        assert args.EXCLUSION_KEY_MODE == "legacy"

    def test_negative_depth_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--max-depth", "-1"])


class TestConfig:
    """Test layering of defaults, config file and CLI flags."""

    def test_defaults_come_from_constants(self):
        config = build_config(parse_args([]))
        assert config.base_url == Constants.MAVEN_BASE_URL
        assert config.output_dir == "lib"
        assert config.pom_dir == "pom"
        assert config.exclusion_key_mode == Constants.DEFAULT_EXCLUSION_KEY_MODE == ExclusionKeyMode.VERSIONED
        assert config.max_depth is None

    def test_yaml_file_section(self, tmp_path):
        path = tmp_path / "depfetch.yml"
        path.write_text(
            "depfetch:\n"
            "  base_url: https://mirror.example/maven2\n"
            "  exclusion_key_mode: unversioned\n"
            "  max_depth: 7\n"
            "  skipped_scopes: [test, provided, system]\n",
            encoding="utf-8",
        )
        config = build_config(parse_args([]), load_config_file(str(path)))
        assert config.base_url == "https://mirror.example/maven2"
        assert config.exclusion_key_mode == ExclusionKeyMode.UNVERSIONED
        assert config.max_depth == 7
        assert config.skipped_scopes == ("test", "provided", "system")

    def test_cli_overrides_file(self, tmp_path):
        path = tmp_path / "depfetch.yml"
        path.write_text("output_dir: from-file\nexclusion_key_mode: legacy\n", encoding="utf-8")
        args = parse_args(["-o", "from-cli", "-c", str(path)])
        config = build_config(args, load_config_file(args.CONFIG))
        assert config.output_dir == "from-cli"
        assert config.exclusion_key_mode == ExclusionKeyMode.LEGACY

    def test_unknown_keys_are_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = build_config(parse_args([]), {"colour": "blue"})
        assert config.output_dir == "lib"
        assert "colour" in caplog.text

    def test_invalid_value_raises_input_error(self):
        with pytest.raises(InputError):
            build_config(parse_args([]), {"exclusion_key_mode": "sometimes"})

    def test_single_scope_string_is_one_scope(self):
        config = build_config(parse_args([]), {"skipped_scopes": "test"})
        assert config.skipped_scopes == ("test",)

    def test_single_scope_string_still_filters_test_dependencies(self):
        config = build_config(parse_args([]), {"skipped_scopes": "test"})
        content = pom_xml(dependencies=[dep_xml("g", "t", "1", scope="test"), dep_xml("g", "c", "1")])
        result = parse_pom(content.encode(), skipped_scopes=config.skipped_scopes)
        assert [d.coordinate.canonical for d in result.declarations] == ["g:c:1"]

    def test_non_list_scopes_raise_input_error(self):
        with pytest.raises(InputError):
            build_config(parse_args([]), {"skipped_scopes": 5})

    def test_missing_config_file_raises_input_error(self, tmp_path):
        with pytest.raises(InputError):
            load_config_file(str(tmp_path / "nope.yml"))

    def test_non_mapping_config_raises_input_error(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(InputError):
            load_config_file(str(path))


class TestSeedInput:
    """Test reading seed coordinates."""

    def test_skips_blank_and_comment_lines(self):
        lines = io.StringIO("# seeds\na:b:1.0\n\n  c:d:2.0  \n")
        assert list(iter_seeds(lines)) == [Coordinate("a", "b", "1.0"), Coordinate("c", "d", "2.0")]

    def test_malformed_line_raises_with_line_number(self):
        with pytest.raises(InputError, match="line 2"):
            list(iter_seeds(["a:b:1.0", "broken"]))

    def test_read_failure_raises_input_error(self):
        def broken_lines():
            yield "a:b:1.0\n"
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        seeds = iter_seeds(broken_lines())
        assert next(seeds) == Coordinate("a", "b", "1.0")
        with pytest.raises(InputError, match="cannot be read"):
            next(seeds)

    def test_missing_file_raises_input_error(self, tmp_path):
        with pytest.raises(InputError):
            open_seed_source(str(tmp_path / "missing.txt"))


class TestRun:
    """Test the CLI run loop end to end with a fake repository."""

    def _args(self, tmp_path, *extra):
        return parse_args([
            "-o", str(tmp_path / "lib"),
            "--pom-dir", str(tmp_path / "pom"),
            "--base-url", BASE_URL,
            *extra,
        ])

    def test_missing_input_file_exits_with_file_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([
                "-f", str(tmp_path / "missing.txt"),
                "-o", str(tmp_path / "lib"),
                "--pom-dir", str(tmp_path / "pom"),
            ])
        assert exc_info.value.code == ExitCodes.FILE_ERROR.value

    def test_resolves_seeds_from_file(self, tmp_path):
        repo = FakeRepository()
        repo.add("a:b:1.0", pom_xml(dependencies=[
            dep_xml("c", "d", "2.0"),
            dep_xml("e", "f", "1.0", scope="test"),
        ]))
        repo.add("c:d:2.0", pom_xml())
        seeds = tmp_path / "seeds.txt"
        seeds.write_text("a:b:1.0\n", encoding="utf-8")

        code = run(self._args(tmp_path, "-f", str(seeds)), fetcher=repo)

        assert code == ExitCodes.SUCCESS.value
        assert sorted(p.name for p in (tmp_path / "lib").iterdir()) == ["b-1.0.jar", "d-2.0.jar"]
        assert (tmp_path / "pom" / "b-1.0.pom").exists()

    def test_reads_standard_input(self, tmp_path, monkeypatch):
        repo = FakeRepository()
        repo.add("a:b:1.0", pom_xml())
        monkeypatch.setattr("sys.stdin", io.StringIO("a:b:1.0\n"))

        code = run(self._args(tmp_path), fetcher=repo)

        assert code == ExitCodes.SUCCESS.value
        assert (tmp_path / "lib" / "b-1.0.jar").exists()

    def test_malformed_seed_aborts(self, tmp_path):
        seeds = tmp_path / "seeds.txt"
        seeds.write_text("not-a-coordinate\n", encoding="utf-8")
        code = run(self._args(tmp_path, "-f", str(seeds)))
        assert code == ExitCodes.FILE_ERROR.value

    def test_undecodable_seed_file_aborts(self, tmp_path):
        seeds = tmp_path / "seeds.txt"
        seeds.write_bytes(b"a:b:1.0\n\xff\xfe:bad\n")
        repo = FakeRepository()
        repo.add("a:b:1.0", pom_xml())
        code = run(self._args(tmp_path, "-f", str(seeds)), fetcher=repo)
        assert code == ExitCodes.FILE_ERROR.value

    def test_failures_are_not_fatal_by_default(self, tmp_path):
        repo = FakeRepository()
        seeds = tmp_path / "seeds.txt"
        seeds.write_text("a:b:1.0\n", encoding="utf-8")

        code = run(self._args(tmp_path, "-f", str(seeds)), fetcher=repo)
        assert code == ExitCodes.SUCCESS.value

    def test_error_on_warnings(self, tmp_path):
        repo = FakeRepository()
        seeds = tmp_path / "seeds.txt"
        seeds.write_text("a:b:1.0\n", encoding="utf-8")

        code = run(self._args(tmp_path, "-f", str(seeds), "--error-on-warnings"), fetcher=repo)
        assert code == ExitCodes.EXIT_WARNINGS.value
