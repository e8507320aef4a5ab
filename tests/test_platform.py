"""Tests for the YAML platform resolver."""

from unittest.mock import patch

import pytest
import yaml

from kbuild.common.errors import ConfigurationError
from kbuild.common.platform import PlatformResolver, parse_configs


class TestResolve:

    def test_mapping_configs(self, platform_file):
        platform = PlatformResolver(platform_file).resolve("riscv64-qemu")

        assert platform.name == "riscv64-qemu"
        assert platform.target == "riscv64gc-unknown-none-elf"
        assert platform.arch == "riscv64"
        assert platform.configs == {"board": "qemu", "driver": "kvirtio,ns16550a"}

    def test_list_configs(self, platform_file):
        platform = PlatformResolver(platform_file).resolve("x86_64-qemu")

        assert platform.arch == "x86_64"
        assert platform.configs == {"board": "qemu", "nographic": None}

    def test_configs_optional(self, platform_file):
        platform = PlatformResolver(platform_file).resolve("aarch64-qemu")
        assert platform.configs == {}

    def test_list_platforms_in_file_order(self, platform_file):
        resolver = PlatformResolver(platform_file)
        assert resolver.list_platforms() == ["riscv64-qemu", "x86_64-qemu", "aarch64-qemu"]

    def test_file_read_once(self, platform_file):
        resolver = PlatformResolver(platform_file)
        with patch("kbuild.common.platform.yaml.safe_load", wraps=yaml.safe_load) as load:
            resolver.resolve("riscv64-qemu")
            resolver.resolve("x86_64-qemu")
            resolver.list_platforms()
        assert load.call_count == 1

    def test_repeated_resolve_is_stable(self, platform_file):
        resolver = PlatformResolver(platform_file)
        assert resolver.resolve("riscv64-qemu") == resolver.resolve("riscv64-qemu")


class TestResolveErrors:

    def test_unknown_platform(self, platform_file):
        with pytest.raises(ConfigurationError, match="Unknown platform: k210"):
            PlatformResolver(platform_file).resolve("k210")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read platform file"):
            PlatformResolver(tmp_path / "missing.yaml").resolve("riscv64-qemu")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "byteos.yaml"
        path.write_text("bin: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            PlatformResolver(path).resolve("riscv64-qemu")

    def test_no_bin_table(self, tmp_path):
        path = tmp_path / "byteos.yaml"
        path.write_text("platforms: {}\n")
        with pytest.raises(ConfigurationError, match="no 'bin' platform table"):
            PlatformResolver(path).load()

    def test_top_level_not_mapping(self, tmp_path):
        path = tmp_path / "byteos.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            PlatformResolver(path).load()

    def test_missing_target(self, tmp_path):
        path = tmp_path / "byteos.yaml"
        path.write_text("bin:\n  broken:\n    configs: []\n")
        with pytest.raises(ConfigurationError, match="no 'target' triple"):
            PlatformResolver(path).resolve("broken")

    def test_unsupported_target(self, tmp_path):
        path = tmp_path / "byteos.yaml"
        path.write_text("bin:\n  mips:\n    target: mips-unknown-none\n")
        with pytest.raises(ConfigurationError):
            PlatformResolver(path).resolve("mips")


class TestParseConfigs:

    def test_none(self):
        assert parse_configs(None) == {}

    def test_strings(self):
        assert parse_configs(["board=k210", 'root_fs="fat32"', "smp"]) == {
            "board": "k210",
            "root_fs": "fat32",
            "smp": None,
        }

    def test_single_key_mappings(self):
        assert parse_configs([{"board": "qemu"}, {"bare": None}]) == {"board": "qemu", "bare": None}

    def test_order_preserved(self):
        assert list(parse_configs({"z": "1", "a": "2", "m": None})) == ["z", "a", "m"]

    def test_bad_shape(self):
        with pytest.raises(ConfigurationError):
            parse_configs("board=qemu")

    def test_bad_entry(self):
        with pytest.raises(ConfigurationError):
            parse_configs([{"a": 1, "b": 2}])

    def test_nested_mapping_value(self):
        with pytest.raises(ConfigurationError):
            parse_configs({"board": {"name": "qemu"}})
