#!/usr/bin/env python3
"""
Command endpoints for the news aggregator.

Each top-level CLI command is handled by a dedicated command class.
"""

from typing import Dict, Type
from .base import BaseCommand
from .news import NewsCommand
from .articles import ArticlesCommand
from .database import DatabaseCommand

# Command registry for easy extension
COMMANDS: Dict[str, Type[BaseCommand]] = {
    'news': NewsCommand,
    'articles': ArticlesCommand,
    'db': DatabaseCommand,
}


def get_command(command_name: str, container=None) -> BaseCommand:
    """Get a command instance by name."""
    if command_name not in COMMANDS:
        available = ', '.join(COMMANDS.keys())
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}")

    return COMMANDS[command_name](container)


def list_commands() -> Dict[str, str]:
    """Get list of available commands with descriptions."""
    return {name: command_class.__doc__ or 'No description available' for name, command_class in COMMANDS.items()}
