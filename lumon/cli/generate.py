"""CLI commands for generating autostart and configuration files."""

import shutil
import sys
from pathlib import Path
from typing import Optional

import typer

generate_app = typer.Typer(help="Generate autostart and configuration files")


def _get_exec_command(config_path: Optional[Path]) -> str:
    """Command line that starts the interactive surface."""
    lumon = shutil.which("lumon")
    command = lumon if lumon else f"{sys.executable} -m lumon"
    config_arg = f" --config {config_path}" if config_path else ""
    return f"{command} run{config_arg}"


def _write_or_echo(content: str, output: Optional[Path]) -> None:
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content)
        typer.echo(f"Written to {output}")
    else:
        typer.echo(content)


@generate_app.command("autostart")
def generate_autostart(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to file instead of stdout",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file to use in the entry",
    ),
) -> None:
    """Generate an XDG autostart desktop entry.

    Example usage:
        lumon generate autostart -o ~/.config/autostart/lumon.desktop
    """
    entry = f"""\
[Desktop Entry]
Type=Application
Name=Lumon
Comment=Adjust monitor brightness
Exec={_get_exec_command(config_path)}
Terminal=true
Categories=Settings;HardwareSettings;
X-GNOME-Autostart-enabled=true
"""

    _write_or_echo(entry, output)
    if not output:
        typer.echo("# Save to: ~/.config/autostart/lumon.desktop")


@generate_app.command("env")
def generate_env(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to file instead of stdout",
    ),
) -> None:
    """Generate an example .env file for configuration.

    Environment variables can be used instead of or alongside a YAML config file.
    Environment variables take precedence over config file values.
    """
    env_content = """\
# lumon environment configuration
# Environment variables override config file values

# Backend: ddc (real monitors) or memory (no hardware)
LUMON_BACKEND=ddc

# ddcutil Settings
LUMON_DDC__DDCUTIL=ddcutil
LUMON_DDC__RETRIES=2
LUMON_DDC__COMMAND_TIMEOUT=10

# Console Settings
LUMON_UI__STEP=5

LUMON_APP__LOG_LEVEL=INFO
"""

    _write_or_echo(env_content, output)


@generate_app.command("config")
def generate_config(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to file instead of stdout",
    ),
) -> None:
    """Generate an example YAML configuration file.

    Example usage:
        lumon generate config > ~/.config/lumon/config.yaml
    """
    config_content = """\
# lumon configuration
# Save to ~/.config/lumon/config.yaml or use --config flag

backend: ddc

ddc:
  ddcutil: ddcutil
  retries: 2
  command_timeout: 10.0
  # Displays with these model names are never listed
  skip_models:
    - Generic PnP Monitor

ui:
  title: Welcome to Lumon
  step: 5

app:
  log_level: INFO

# Displays served by 'backend: memory'
#
# memory:
#   displays:
#     - id: mem-1
#       name: Built-in Display
#       brightness: 70
"""

    _write_or_echo(config_content, output)
