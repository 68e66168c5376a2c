from __future__ import annotations

import subprocess
from datetime import timedelta

import pytest

from unit_watcher.detection.restart import ProbeReading
from unit_watcher.errors import ProbeError
from unit_watcher.probe import systemd
from unit_watcher.probe.systemd import SystemdProbe, parse_show_output, read_boot_uptime_us

ACTIVE_OUTPUT = "ActiveEnterTimestampMonotonic=1000000\nActiveState=active\n"


def _fake_run(monkeypatch: pytest.MonkeyPatch, *, stdout: str = "", stderr: str = "", returncode: int = 0):
    calls: list[dict] = []

    def fake_run(cmd, **kwargs):
        calls.append({"cmd": cmd, **kwargs})
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    monkeypatch.setattr(systemd.subprocess, "run", fake_run)
    return calls


@pytest.fixture
def proc_uptime(tmp_path):
    path = tmp_path / "uptime"
    path.write_text("12.50 40.00\n", encoding="ascii")
    return path


def test_parse_show_output_reads_both_properties() -> None:
    assert parse_show_output(ACTIVE_OUTPUT) == (1_000_000, "active")


def test_parse_show_output_ignores_noise() -> None:
    out = "\n  ActiveState=failed  \nGarbage\nActiveEnterTimestampMonotonic=0\n"
    assert parse_show_output(out) == (0, "failed")


@pytest.mark.parametrize(
    ("output", "needle"),
    [
        ("ActiveState=active\n", "missing ActiveEnterTimestampMonotonic"),
        ("ActiveEnterTimestampMonotonic=5\n", "missing ActiveState"),
        ("ActiveEnterTimestampMonotonic=abc\nActiveState=active\n", "parse ActiveEnterTimestampMonotonic"),
    ],
)
def test_parse_show_output_errors(output: str, needle: str) -> None:
    with pytest.raises(ProbeError, match=needle):
        parse_show_output(output)


def test_read_boot_uptime_us(proc_uptime) -> None:
    assert read_boot_uptime_us(proc_uptime) == 12_500_000


def test_read_boot_uptime_us_errors(tmp_path) -> None:
    with pytest.raises(ProbeError, match="read"):
        read_boot_uptime_us(tmp_path / "missing")
    empty = tmp_path / "empty"
    empty.write_text("", encoding="ascii")
    with pytest.raises(ProbeError, match="unexpected"):
        read_boot_uptime_us(empty)
    bad = tmp_path / "bad"
    bad.write_text("abc 1.0", encoding="ascii")
    with pytest.raises(ProbeError, match="parse"):
        read_boot_uptime_us(bad)


def test_active_unit_uptime_from_monotonic_clock(monkeypatch, proc_uptime) -> None:
    calls = _fake_run(monkeypatch, stdout=ACTIVE_OUTPUT)
    probe = SystemdProbe(timeout=timedelta(seconds=3), proc_uptime=proc_uptime)

    assert probe.read("nginx.service") == ProbeReading(11_500, "active")
    assert calls[0]["cmd"] == [
        "systemctl",
        "show",
        "nginx.service",
        "-p",
        "ActiveEnterTimestampMonotonic",
        "-p",
        "ActiveState",
    ]
    assert calls[0]["timeout"] == 3.0


def test_enter_timestamp_in_future_clamps_to_zero(monkeypatch, proc_uptime) -> None:
    _fake_run(monkeypatch, stdout="ActiveEnterTimestampMonotonic=99000000\nActiveState=active\n")
    probe = SystemdProbe(timeout=timedelta(seconds=1), proc_uptime=proc_uptime)
    assert probe.read("x.service").uptime_ms == 0


@pytest.mark.parametrize(
    "stdout",
    [
        "ActiveEnterTimestampMonotonic=1000000\nActiveState=failed\n",
        "ActiveEnterTimestampMonotonic=0\nActiveState=active\n",
    ],
)
def test_inactive_or_never_entered_reports_zero_uptime(monkeypatch, tmp_path, stdout: str) -> None:
    _fake_run(monkeypatch, stdout=stdout)
    # /proc/uptime is not consulted, so a missing file must not matter
    probe = SystemdProbe(timeout=timedelta(seconds=1), proc_uptime=tmp_path / "missing")
    reading = probe.read("x.service")
    assert reading.uptime_ms == 0


def test_non_zero_exit_is_probe_error(monkeypatch) -> None:
    _fake_run(monkeypatch, returncode=1, stderr="Failed to connect to bus\n")
    probe = SystemdProbe(timeout=timedelta(seconds=1))
    with pytest.raises(ProbeError, match="exit status 1: Failed to connect to bus"):
        probe.read("x.service")


def test_timeout_is_probe_error(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(systemd.subprocess, "run", fake_run)
    probe = SystemdProbe(timeout=timedelta(milliseconds=500))
    with pytest.raises(ProbeError, match="timed out after 0.5s"):
        probe.read("x.service")


def test_missing_binary_is_probe_error() -> None:
    probe = SystemdProbe(timeout=timedelta(seconds=1), systemctl="/nonexistent/systemctl")
    with pytest.raises(ProbeError, match="systemctl show failed"):
        probe.read("x.service")
