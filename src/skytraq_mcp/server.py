"""MCP server entry point for SkyTraq GPS receivers.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import SkytraqError
from .protocol.commands import (
    MessageID,
    StartMode,
    build_command,
    build_query_position_rate,
    build_query_power_mode,
    build_query_software_crc,
    build_query_software_version,
    build_system_restart,
)
from .protocol.parser import (
    parse_navigation,
    parse_position_rate,
    parse_power_mode,
    parse_response,
    parse_software_crc,
    parse_software_version,
)
from .transport.serial_connection import (
    DEFAULT_BAUDRATE,
    SkytraqConnection,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "skytraq-gps",
    instructions="MCP server for SkyTraq GPS receivers (binary protocol over serial)",
)

# Global connection state
_connection: SkytraqConnection | None = None

MAX_NAVIGATION_FRAMES = 50


def _get_connection() -> SkytraqConnection:
    """Get the active connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to receiver. Use the 'connect' tool first."
        )
    return _connection


def _error(e: Exception) -> dict[str, str]:
    logger.error("receiver error: %s", e)
    return {"error": str(e)}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str, baudrate: int = DEFAULT_BAUDRATE) -> dict[str, Any]:
    """Open the serial port to the GPS receiver.

    Flushes the port and sends a software version query; the receiver
    must acknowledge it for the connection to be considered up.

    Args:
        port: Serial device, e.g. /dev/ttyUSB0 or COM3.
        baudrate: Port speed (default 230400).
    """
    global _connection
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.port_name,
        }

    try:
        _connection = SkytraqConnection.connect(port, baudrate)
    except SkytraqError as e:
        return _error(e)

    return {"connected": True, "port": port, "baudrate": baudrate}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial port."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


# ─── QUERY TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def get_software_version() -> dict[str, Any]:
    """Query kernel, ODM and revision versions (0x02 → 0x80)."""
    conn = _get_connection()
    try:
        frame = conn.request(
            build_query_software_version(), MessageID.SOFTWARE_VERSION
        )
        return parse_software_version(frame).to_dict()
    except SkytraqError as e:
        return _error(e)


@mcp.tool()
def get_software_crc() -> dict[str, Any]:
    """Query the firmware CRC (0x03 → 0x81)."""
    conn = _get_connection()
    try:
        frame = conn.request(build_query_software_crc(), MessageID.SOFTWARE_CRC)
        return parse_software_crc(frame).to_dict()
    except SkytraqError as e:
        return _error(e)


@mcp.tool()
def get_position_rate() -> dict[str, Any]:
    """Query the position update rate (0x10 → 0x86)."""
    conn = _get_connection()
    try:
        frame = conn.request(build_query_position_rate(), MessageID.POSITION_RATE)
        return parse_position_rate(frame).to_dict()
    except SkytraqError as e:
        return _error(e)


@mcp.tool()
def get_power_mode() -> dict[str, Any]:
    """Query the power mode (0x15 → 0xB9)."""
    conn = _get_connection()
    try:
        frame = conn.request(build_query_power_mode(), MessageID.POWER_MODE)
        return parse_power_mode(frame).to_dict()
    except SkytraqError as e:
        return _error(e)


@mcp.tool()
def read_navigation(max_frames: int = MAX_NAVIGATION_FRAMES) -> dict[str, Any]:
    """Wait for the next navigation solution the receiver streams (0xA8).

    Args:
        max_frames: Give up after this many frames of other kinds.
    """
    conn = _get_connection()
    try:
        for _ in range(max_frames):
            frame = conn.read_frame()
            if frame.id == MessageID.NAVIGATION_DATA:
                return parse_navigation(frame).to_dict()
    except SkytraqError as e:
        return _error(e)
    return {"error": f"No navigation data within {max_frames} frames"}


# ─── CONTROL TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def restart_receiver(mode: str = "hot") -> dict[str, Any]:
    """Restart the receiver.

    Args:
        mode: "hot", "warm" or "cold".
    """
    try:
        start_mode = StartMode[mode.upper()]
    except KeyError:
        return {"error": f"Unknown restart mode '{mode}'. Valid: hot, warm, cold"}

    conn = _get_connection()
    try:
        attempts = conn.write_frame(build_system_restart(start_mode))
    except SkytraqError as e:
        return _error(e)
    return {"restarted": True, "mode": start_mode.name.lower(), "attempts": attempts}


@mcp.tool()
def send_command(message_id: int, payload_hex: str = "") -> dict[str, Any]:
    """Send an arbitrary binary command and wait for its ACK.

    Args:
        message_id: Message ID (0-255).
        payload_hex: Payload as hex, spaces allowed (e.g. "01 00").
    """
    try:
        payload = bytes.fromhex(payload_hex)
        frame = build_command(message_id, payload)
    except ValueError as e:
        return {"error": str(e)}

    conn = _get_connection()
    try:
        attempts = conn.write_frame(frame)
    except SkytraqError as e:
        return _error(e)
    return {"acknowledged": True, "message_id": f"0x{message_id:02X}", "attempts": attempts}


@mcp.tool()
def read_message() -> dict[str, Any]:
    """Read the next frame the receiver sends and decode it when possible."""
    conn = _get_connection()
    try:
        frame = conn.read_frame()
        message = parse_response(frame)
    except SkytraqError as e:
        return _error(e)

    result: dict[str, Any] = {"message_id": f"0x{frame.id:02X}"}
    if message is frame:
        result["payload_hex"] = frame.payload.hex(" ")
    else:
        result["data"] = message.to_dict()
    return result


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("skytraq://device/status")
def resource_device_status() -> str:
    """Connection state and serial port."""
    if _connection is None or not _connection.connected:
        return json.dumps({"connected": False})
    return json.dumps({"connected": True, "port": _connection.port_name})


@mcp.resource("skytraq://protocol/messages")
def resource_messages() -> str:
    """Binary message IDs understood by this server."""
    messages = [{"id": f"0x{m.value:02X}", "name": m.name} for m in MessageID]
    return json.dumps({"messages": messages, "count": len(messages)})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def diagnose_fix() -> str:
    """Guide the AI through checking why the receiver has no usable fix."""
    return """Check why the GPS receiver has no usable position fix.
Steps:
- Use get_software_version to confirm the receiver answers commands
- Use read_navigation a few times and look at fix mode and satellite count
- A fix of NONE with few satellites usually means poor sky view
- A high HDOP means poor satellite geometry
- Use get_position_rate and get_power_mode to check the configuration

If nothing helps, use restart_receiver with mode "cold"."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport.

    When SKYTRAQ_PORT is set the receiver is connected before serving.
    """
    logging.basicConfig(level=logging.INFO)

    port = os.environ.get("SKYTRAQ_PORT")
    if port:
        baudrate = int(os.environ.get("SKYTRAQ_BAUDRATE", DEFAULT_BAUDRATE))
        result = connect(port, baudrate)
        if "error" in result:
            logger.warning("Could not connect to %s: %s", port, result["error"])

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
