"""
Beacon - Main Entry Point.

Connects the Discord bot and serves the Beacon tools to an MCP client over
stdio. stdout belongs to the MCP transport, so all diagnostics go to stderr
and the log file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import discord
import yaml

from beacon import __version__
from beacon.patterns import build_registry
from beacon.server import create_server, serve_stdio
from beacon.tools import create_tools

# ============================================================================
# Configuration Loading
# ============================================================================


def load_config(config_path: str = "config.yml") -> dict[str, Any]:
    """
    Load configuration from YAML file.

    ``DISCORD_TOKEN`` and ``DISCORD_GUILD_ID`` environment variables take
    precedence over ``discord.token`` and ``discord.default_guild_id``.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid.
        ValueError: If no Discord token is configured.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            "Please create a config.yml file based on config.yml.example"
        )

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    discord_config = config.get("discord") or {}
    config["discord"] = discord_config
    if os.environ.get("DISCORD_TOKEN"):
        discord_config["token"] = os.environ["DISCORD_TOKEN"]
    if os.environ.get("DISCORD_GUILD_ID"):
        discord_config["default_guild_id"] = os.environ["DISCORD_GUILD_ID"]

    if not discord_config.get("token"):
        raise ValueError("Discord token not found in config.yml or DISCORD_TOKEN")

    if discord_config.get("default_guild_id") is not None:
        discord_config["default_guild_id"] = str(discord_config["default_guild_id"])

    return config


# ============================================================================
# Logging Setup
# ============================================================================


def setup_logging(config: dict[str, Any]) -> logging.Logger:
    """
    Set up logging based on configuration.

    Args:
        config: Configuration dictionary; only the ``logging`` section is read.

    Returns:
        The ``beacon`` logger.
    """
    log_config = config.get("logging", {}) or {}
    log_level = getattr(logging, str(log_config.get("level", "INFO")).upper())
    log_file = log_config.get("file", "logs/beacon.log")
    log_format = log_config.get(
        "format",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    max_size = log_config.get("max_size_mb", 10) * 1024 * 1024
    backup_count = log_config.get("backup_count", 5)

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("beacon")
    logger.setLevel(log_level)

    # stderr, stdout carries MCP messages
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(file_handler)

    return logger


# ============================================================================
# Discord Client
# ============================================================================


class BeaconClient(discord.Client):
    """discord.py client the tools operate through."""

    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True
        intents.message_content = True
        intents.voice_states = True

        super().__init__(intents=intents)
        self.logger = logging.getLogger("beacon.client")

    async def on_ready(self) -> None:
        self.logger.info(f"Logged in as {self.user} ({len(self.guilds)} servers)")


async def wait_for_ready(client: discord.Client, bot_task: asyncio.Task) -> None:
    """Wait until the client is ready, re-raising if it stops first."""
    ready = asyncio.create_task(client.wait_until_ready())
    done, _ = await asyncio.wait({bot_task, ready}, return_when=asyncio.FIRST_COMPLETED)
    if ready not in done:
        ready.cancel()
        bot_task.result()
        raise RuntimeError("Discord client stopped before becoming ready")


async def run_server(config: dict[str, Any]) -> None:
    """Start the bot, then serve MCP over stdio until the client disconnects."""
    logger = logging.getLogger("beacon.main")
    registry = build_registry(config)
    logger.info(f"Loaded {len(registry)} cheat patterns")

    discord_config = config["discord"]
    client = BeaconClient()
    tools = create_tools(client, registry, discord_config.get("default_guild_id"))
    server = create_server(tools)
    logger.info(f"Registered {len(tools)} tools")

    async with client:
        bot_task = asyncio.create_task(client.start(discord_config["token"]))
        try:
            await wait_for_ready(client, bot_task)
            await serve_stdio(server)
        finally:
            await client.close()
            if not bot_task.done():
                bot_task.cancel()
    logger.info("Beacon stopped")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="beacon", description="Discord MCP tool server")
    parser.add_argument("--config", default="config.yml", help="Path to config.yml")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


async def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for Beacon."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error parsing {args.config}: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    logger = setup_logging(config)
    logger.info(f"Starting Beacon {__version__}...")

    try:
        await run_server(config)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except discord.LoginFailure:
        logger.error("Invalid Discord token. Please check your config.yml")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
