"""
Tests for the tool table — loading, validation and resolution.
"""

import textwrap
from pathlib import Path

import pytest

from devsetup.core.config.registry_loader import TOOLS_FILE_ENV, load_tools, parse_tools
from devsetup.core.errors import RegistryError, UnsupportedPlatform
from devsetup.core.models.platform import PLATFORM_KEYS, PlatformId
from devsetup.core.models.tool import Command, InstallAction, ToolKind, Unsupported
from devsetup.core.services.provisioning.data.constants import STAGE_ORDER
from devsetup.core.services.provisioning.resolver.registry import ToolRegistry


def _tool(name: str, entry: dict | None = None, **extra) -> dict:
    entry = entry if entry is not None else {"commands": [{"argv": ["install", name]}]}
    return {
        "name": name,
        "cli": [name],
        "install": {key: dict(entry) for key in PLATFORM_KEYS},
        **extra,
    }


# ── Packaged table ───────────────────────────────────────────────────


class TestPackagedTable:
    def test_every_stage_present(self, registry: ToolRegistry):
        for stage in STAGE_ORDER:
            assert stage in registry
        assert len(registry) == len(STAGE_ORDER)

    def test_every_tool_covers_every_platform(self, registry: ToolRegistry):
        for name in registry:
            spec = registry.get(name)
            assert set(spec.install) == set(PLATFORM_KEYS), name

    def test_prerequisites(self, registry: ToolRegistry):
        flagged = {name for name in registry if registry.get(name).prerequisite}
        assert flagged == {"package-manager", "miniconda"}

    def test_environment_kind(self, registry: ToolRegistry):
        assert registry.get("environment").kind == ToolKind.ENVIRONMENT

    def test_environment_requires_miniconda_everywhere(self, registry: ToolRegistry):
        spec = registry.get("environment")
        for key in PLATFORM_KEYS:
            assert spec.install[key].requires == ["miniconda"]

    def test_env_override(self, tmp_path: Path, monkeypatch, tools_file: Path):
        override = tmp_path / "tools.yml"
        override.write_text(tools_file.read_text())
        monkeypatch.setenv(TOOLS_FILE_ENV, str(override))
        assert list(load_tools()) == list(STAGE_ORDER)


# ── Resolution ───────────────────────────────────────────────────────


class TestResolve:
    def test_ubuntu_curl(self, registry: ToolRegistry):
        action = registry.resolve("curl", PlatformId.linux("ubuntu"))
        assert isinstance(action, InstallAction)
        assert [c.argv for c in action.commands] == [
            ["apt-get", "update"],
            ["apt-get", "install", "-y", "curl"],
        ]
        assert all(c.needs_sudo for c in action.commands)
        assert action.needs == ["apt-get"]
        assert action.executables == ["curl"]

    def test_unknown_linux_is_unsupported(self, registry: ToolRegistry):
        result = registry.resolve("git", PlatformId.linux("unknown"))
        assert isinstance(result, Unsupported)
        assert "Git" in result.reason

    def test_linux_package_manager_is_unsupported(self, registry: ToolRegistry):
        result = registry.resolve("package-manager", PlatformId.linux("arch"))
        assert isinstance(result, Unsupported)

    def test_windows_requires_package_manager(self, registry: ToolRegistry):
        action = registry.resolve("wget", PlatformId.windows())
        assert isinstance(action, InstallAction)
        assert action.requires == ["package-manager"]
        assert action.commands[0].argv == ["choco", "install", "wget", "-y"]

    def test_arch_substitution_linux(self, registry: ToolRegistry):
        action = registry.resolve("miniconda", PlatformId.linux("debian", arch="aarch64"))
        urls = [arg for c in action.commands for arg in c.argv if arg.startswith("https://")]
        assert urls == ["https://repo.anaconda.com/miniconda/Miniconda3-latest-Linux-aarch64.sh"]

    def test_arch_substitution_macos(self, registry: ToolRegistry):
        action = registry.resolve("miniconda", PlatformId.macos("arm64"))
        joined = " ".join(arg for c in action.commands for arg in c.argv)
        assert "Miniconda3-latest-MacOSX-arm64.sh" in joined
        assert action.requires == ["curl"]
        assert action.post_path == ["~/miniconda3/bin"]

    def test_unknown_platform_raises(self, registry: ToolRegistry):
        with pytest.raises(UnsupportedPlatform):
            registry.resolve("curl", PlatformId.unknown())

    def test_unknown_tool_raises(self, registry: ToolRegistry):
        with pytest.raises(RegistryError, match="Unknown tool"):
            registry.resolve("emacs", PlatformId.linux("ubuntu"))

    def test_require(self, registry: ToolRegistry):
        registry.require(STAGE_ORDER)
        with pytest.raises(RegistryError, match="emacs"):
            registry.require(["curl", "emacs"])


class TestExecutables:
    def test_rpm_family_accepts_dnf_or_yum(self, registry: ToolRegistry):
        assert registry.executables("package-manager", PlatformId.linux("centos")) == ["dnf", "yum"]

    def test_default_cli(self, registry: ToolRegistry):
        assert registry.executables("vscode", PlatformId.windows()) == ["code"]

    def test_unknown_platform_has_none(self, registry: ToolRegistry):
        assert registry.executables("git", PlatformId.unknown()) == []


class TestInstallDirs:
    def test_miniconda_user_install(self, registry: ToolRegistry):
        assert registry.install_dirs("miniconda", PlatformId.linux("ubuntu")) == ["~/miniconda3/bin"]
        assert registry.install_dirs("miniconda", PlatformId.macos()) == ["~/miniconda3/bin"]

    def test_tools_without_post_path(self, registry: ToolRegistry):
        assert registry.install_dirs("curl", PlatformId.linux("ubuntu")) == []

    def test_unknown_platform_has_none(self, registry: ToolRegistry):
        assert registry.install_dirs("miniconda", PlatformId.unknown()) == []


class TestPlaceholders:
    def test_with_variables_leaves_unknown_placeholders(self):
        command = Command(argv=["a-{arch}", "{other}"], needs_sudo=True)
        filled = command.with_variables({"arch": "x86_64"})
        assert filled.argv == ["a-x86_64", "{other}"]
        assert filled.needs_sudo
        assert command.argv == ["a-{arch}", "{other}"]

    def test_workdir_left_for_the_runner(self, registry: ToolRegistry):
        action = registry.resolve("miniconda", PlatformId.linux("ubuntu"))
        assert action.uses_workdir
        assert any("{tmpdir}/miniconda.sh" in arg for c in action.commands for arg in c.argv)

    def test_actions_without_workdir(self, registry: ToolRegistry):
        assert not registry.resolve("curl", PlatformId.linux("ubuntu")).uses_workdir

    @pytest.mark.parametrize("key", ["ubuntu", "debian", "fedora", "arch", "macos"])
    def test_no_fixed_paths_under_tmp(self, registry: ToolRegistry, key: str):
        platform = PlatformId.macos() if key == "macos" else PlatformId.linux(key)
        for name in registry:
            action = registry.resolve(name, platform)
            if isinstance(action, Unsupported):
                continue
            for command in action.commands:
                assert not any("/tmp/" in arg for arg in command.argv), (name, command.argv)


# ── Validation ───────────────────────────────────────────────────────


class TestParseTools:
    def test_valid_minimal(self):
        specs = parse_tools({"tools": [_tool("curl"), _tool("git")]})
        assert list(specs) == ["curl", "git"]

    def test_not_a_mapping(self):
        with pytest.raises(RegistryError, match="'tools' list"):
            parse_tools(["curl"])

    def test_missing_platform_key(self):
        raw = _tool("curl")
        del raw["install"]["windows"]
        with pytest.raises(RegistryError, match="windows"):
            parse_tools({"tools": [raw]})

    def test_unknown_platform_key(self):
        raw = _tool("curl")
        raw["install"]["solaris"] = {"unsupported": "no"}
        with pytest.raises(RegistryError, match="solaris"):
            parse_tools({"tools": [raw]})

    def test_unknown_requires(self):
        raw = _tool("git", {"commands": [{"argv": ["x"]}], "requires": ["emacs"]})
        with pytest.raises(RegistryError, match="unknown tool 'emacs'"):
            parse_tools({"tools": [raw]})

    def test_self_requires(self):
        raw = _tool("git", {"commands": [{"argv": ["x"]}], "requires": ["git"]})
        with pytest.raises(RegistryError, match="requires itself"):
            parse_tools({"tools": [raw]})

    def test_duplicate(self):
        with pytest.raises(RegistryError, match="Duplicate"):
            parse_tools({"tools": [_tool("git"), _tool("git")]})

    def test_unsupported_with_commands(self):
        raw = _tool("git", {"unsupported": "no", "commands": [{"argv": ["x"]}]})
        with pytest.raises(RegistryError, match="Invalid tool entry"):
            parse_tools({"tools": [raw]})

    def test_package_without_commands(self):
        raw = _tool("git", {})
        with pytest.raises(RegistryError, match="no commands"):
            parse_tools({"tools": [raw]})

    def test_environment_with_commands(self):
        raw = _tool("env", kind="environment")
        with pytest.raises(RegistryError, match="cannot declare commands"):
            parse_tools({"tools": [raw]})


class TestLoadTools:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(RegistryError, match="not found"):
            load_tools(tmp_path / "tools.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "tools.yml"
        path.write_text("tools: [unclosed\n")
        with pytest.raises(RegistryError, match="Invalid YAML"):
            load_tools(path)

    def test_yaml_anchors(self, tmp_path: Path):
        keys = "\n".join(f"      {k}: *entry" for k in PLATFORM_KEYS[1:])
        path = tmp_path / "tools.yml"
        path.write_text(textwrap.dedent(f"""\
            tools:
              - name: git
                cli: [git]
                install:
                  {PLATFORM_KEYS[0]}: &entry
                    commands:
                      - {{argv: [install, git]}}
            """) + keys + "\n")
        specs = load_tools(path)
        assert set(specs["git"].install) == set(PLATFORM_KEYS)
