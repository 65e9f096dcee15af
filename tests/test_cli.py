"""Tests for CLI functionality."""

import json
import subprocess
import sys

import pytest

from conftest import COMPONENTS, VST, VST3, make_bundle


@pytest.fixture
def libraries(tmp_path):
    """Create a system and a user library with a few plugins."""
    system = tmp_path / "System" / "Library"
    make_bundle(
        system / COMPONENTS,
        "Reverb.component",
        {"CFBundleShortVersionString": "1.2", "CFBundleGetInfoString": "Acme Reverb"},
    )
    make_bundle(system / VST3, "Synth.vst3")

    user = tmp_path / "Users" / "me" / "Library"
    make_bundle(user / VST, "Delay.vst")
    (user / VST / "readme.txt").write_text("not a plugin")

    return system, user


def run_cli(*args, cwd=None):
    """Run the CLI and return the result."""
    cmd = [sys.executable, "-m", "avx_sight"] + [str(a) for a in args]
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        cwd=cwd,
    )
    return result


def scan_args(libraries, tmp_path, *extra):
    system, user = libraries
    return [
        "scan",
        "--system-library", system,
        "--user-library", user,
        "--grants-file", tmp_path / "grants.json",
        *extra,
    ]


class TestScanCommand:
    """Test the scan command."""

    def test_scan_text(self, libraries, tmp_path):
        result = run_cli(*scan_args(libraries, tmp_path, "--yes"))

        assert result.returncode == 0
        assert "Found 3 plugin(s):" in result.stdout
        assert "Reverb" in result.stdout
        assert "Type: AudioUnit" in result.stdout
        assert "readme" not in result.stdout
        assert result.stderr == ""

    def test_scan_json(self, libraries, tmp_path):
        result = run_cli(*scan_args(libraries, tmp_path, "--yes", "--format", "json"))

        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert [item["name"] for item in data] == ["Delay", "Reverb", "Synth"]
        reverb = data[1]
        assert reverb["version"] == "1.2"
        assert reverb["domain"] == "system"

    def test_scan_search(self, libraries, tmp_path):
        result = run_cli(
            *scan_args(libraries, tmp_path, "--yes", "--format", "json", "--search", "VERB")
        )

        assert result.returncode == 0
        assert [item["name"] for item in json.loads(result.stdout)] == ["Reverb"]

    def test_scan_without_grants_reports_notice(self, libraries, tmp_path):
        result = run_cli(*scan_args(libraries, tmp_path, "--no-prompt"))

        assert result.returncode == 0
        assert "No plugins found." in result.stdout
        assert "Notice: Access denied" in result.stderr

    def test_grants_are_remembered(self, libraries, tmp_path):
        run_cli(*scan_args(libraries, tmp_path, "--yes"))

        result = run_cli(*scan_args(libraries, tmp_path, "--no-prompt"))

        assert result.returncode == 0
        assert "Found 3 plugin(s):" in result.stdout
        assert result.stderr == ""

    def test_scan_interactive_end_of_input(self, libraries, tmp_path):
        result = subprocess.run(
            [sys.executable, "-m", "avx_sight"]
            + [str(a) for a in scan_args(libraries, tmp_path)],
            capture_output=True,
            text=True,
            input="",
        )

        assert result.returncode == 0
        assert result.stdout.strip() == "No plugins found."
        assert "Grant Access to Folder: Library" in result.stderr
        assert "Request cancelled" in result.stderr

    def test_scan_audit_log(self, libraries, tmp_path):
        log_path = tmp_path / "audit.jsonl"

        run_cli(*scan_args(libraries, tmp_path, "--yes", "--audit-log", log_path))

        kinds = [json.loads(line)["kind"] for line in log_path.read_text().splitlines()]
        assert kinds.count("scan") == 2
        assert kinds.count("grant") == 2

    def test_scan_with_config_file(self, libraries, tmp_path):
        _, user = libraries
        config_file = tmp_path / "avx-sight.yaml"
        config_file.write_text(
            f"""roots:
  - path: {user}
    domain: user
extensions: [vst]
grants_path: {tmp_path}/grants.json
"""
        )

        result = run_cli("scan", "--config", config_file, "--yes", "--format", "json")

        assert result.returncode == 0
        assert [item["name"] for item in json.loads(result.stdout)] == ["Delay"]

    def test_scan_with_invalid_config(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("extensions: [dll]\n")

        result = run_cli("scan", "--config", config_file, "--no-prompt")

        assert result.returncode == 1
        assert "Error:" in result.stderr

    def test_yes_and_no_prompt_are_exclusive(self, libraries, tmp_path):
        result = run_cli(*scan_args(libraries, tmp_path, "--yes", "--no-prompt"))

        assert result.returncode != 0


class TestShowCommand:
    """Test the show command."""

    def test_show_text(self, libraries):
        system, _ = libraries
        bundle = system / COMPONENTS / "Reverb.component"

        result = run_cli("show", bundle)

        assert result.returncode == 0
        assert "Plugin Details" in result.stdout
        assert "Reverb" in result.stdout
        assert "AudioUnit" in result.stdout
        assert str(bundle) in result.stdout
        assert "Acme Reverb" in result.stdout

    def test_show_json(self, libraries):
        _, user = libraries

        result = run_cli("show", user / VST / "Delay.vst", "--format", "json")

        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert data["name"] == "Delay"
        assert data["kind"] == "VST"

    def test_show_missing_bundle(self, tmp_path):
        result = run_cli("show", tmp_path / "Missing.vst3")

        assert result.returncode == 1
        assert "not found" in result.stderr

    def test_show_unrecognized_bundle(self, libraries):
        _, user = libraries

        result = run_cli("show", user / VST / "readme.txt")

        assert result.returncode == 1
        assert "Not a recognized plugin bundle" in result.stderr


class TestGrantsCommand:
    """Test the grants command."""

    def test_list_empty(self, tmp_path):
        result = run_cli("grants", "list", "--grants-file", tmp_path / "grants.json")

        assert result.returncode == 0
        assert "No grants stored." in result.stdout

    def test_list_revoke_clear(self, libraries, tmp_path):
        system, _ = libraries
        grants_file = tmp_path / "grants.json"
        run_cli(*scan_args(libraries, tmp_path, "--yes"))

        listed = run_cli("grants", "list", "--grants-file", grants_file)
        assert "2 grant(s):" in listed.stdout
        assert str(system) in listed.stdout

        revoked = run_cli("grants", "revoke", system, "--grants-file", grants_file)
        assert revoked.returncode == 0
        assert f"Revoked access grant for {system}" in revoked.stdout

        again = run_cli("grants", "revoke", system, "--grants-file", grants_file)
        assert again.returncode == 1
        assert "No grant stored" in again.stderr

        cleared = run_cli("grants", "clear", "--grants-file", grants_file)
        assert "Cleared all grants." in cleared.stdout
        assert "No grants stored." in run_cli("grants", "list", "--grants-file", grants_file).stdout

    def test_revoke_is_audited(self, libraries, tmp_path):
        system, _ = libraries
        grants_file = tmp_path / "grants.json"
        log_path = tmp_path / "grants-audit.jsonl"
        run_cli(*scan_args(libraries, tmp_path, "--yes"))

        result = run_cli(
            "grants", "revoke", system, "--grants-file", grants_file, "--audit-log", log_path
        )

        assert result.returncode == 0
        events = [json.loads(line) for line in log_path.read_text().splitlines()]
        assert [(e["kind"], e["detail"]["operation"]) for e in events] == [("grant", "revoke")]
        assert events[0]["path"] == str(system)

    def test_revoke_requires_path(self, tmp_path):
        result = run_cli("grants", "revoke", "--grants-file", tmp_path / "grants.json")

        assert result.returncode == 1
        assert "requires a folder path" in result.stderr


class TestHelp:
    def test_help_command(self):
        result = run_cli("--help")

        assert result.returncode == 0
        assert "scan" in result.stdout
        assert "show" in result.stdout
        assert "grants" in result.stdout

    def test_no_command(self):
        result = run_cli()

        assert result.returncode == 1
