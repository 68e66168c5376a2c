from unit_watcher.probe.systemd import SystemdProbe, parse_show_output, read_boot_uptime_us

__all__ = ["SystemdProbe", "parse_show_output", "read_boot_uptime_us"]
