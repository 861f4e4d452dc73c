"""Text status reports sent over BLE and written to the console."""

from __future__ import annotations

STATUS_BUFFER_SIZE = 128
_GPS_INFO_BUFFER_SIZE = 64


def status_message(
    angle: float,
    velocity: float,
    gps_fix: bool,
    latitude: float,
    longitude: float,
) -> str:
    """Return the one-line status text, limited to 127 characters."""
    limit = STATUS_BUFFER_SIZE - 1
    status = f"Angle:{angle:.2f} Vel:{velocity:.1f} GPS:{'OK' if gps_fix else 'NO'}"
    status = status[:limit]
    if gps_fix:
        gps_info = f" Lat:{latitude:.6f} Lon:{longitude:.6f}"
        gps_info = gps_info[: _GPS_INFO_BUFFER_SIZE - 1]
        status += gps_info[: limit - len(status)]
    return status


def debug_lines(
    angle: float,
    velocity: float,
    battery_voltage: float,
    battery_percent: int,
    gps_fix: bool,
    latitude: float,
    longitude: float,
    satellites: int,
    standing_up: bool,
) -> list[str]:
    """Return the periodic console report, one string per line."""
    lines = [
        f"Angle: {angle:.2f} | Velocity: {velocity:.2f} | "
        f"Battery: {battery_voltage:.1f}V({int(battery_percent)}%) | "
        f"GPS: {'Valid' if gps_fix else 'Invalid'}"
    ]
    if gps_fix:
        lines.append(
            f"GPS - Lat: {latitude:.6f} | Lon: {longitude:.6f} | Sats: {int(satellites)}"
        )
    lines.append(f"Standup: {'Active' if standing_up else 'Idle'}")
    return lines