#!/usr/bin/env python3
"""
Database command endpoints: schema bootstrap and health.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from core.env_loader import validate_database_config

logger = logging.getLogger(__name__)


class DatabaseCommand(BaseCommand):
    """Create the schema and check database health."""

    subcommands = ['init', 'health']

    @property
    def name(self) -> str:
        return 'db'

    def dispatch(self, subcommand: str, args: Namespace) -> int:
        if subcommand == "init":
            return self.init(args)
        return self.health(args)

    def init(self, args: Namespace) -> int:
        """Create tables and indexes if they are missing."""
        validate_database_config()
        self.database.ensure_schema()
        print("✅ Database schema is ready")
        return 0

    def health(self, args: Namespace) -> int:
        """Check the database connection and report table counts."""
        print("📊 Database Health Check")
        print("=" * 30)

        health = self.database.health_check()
        if not health.get('connected', False):
            print(f"❌ Database connection failed: {health.get('error')}")
            return 1

        print("✅ Database connection successful")
        tables = health.get('tables', {})
        if 'error' in tables:
            print(f"⚠️  Table statistics unavailable: {tables['error']}")
            return 1

        print("\n📋 Table Statistics:")
        for table, count in tables.items():
            print(f"  • {table}: {count:,} records")

        provider_status = {
            'newsapi': self.config.has_newsapi(),
            'guardian': self.config.has_guardian(),
            'nyt': self.config.has_nyt()
        }
        print("\n🔌 Provider credentials:")
        for provider, configured in provider_status.items():
            print(f"  {'✅' if configured else '⚠️ '} {provider}")
        return 0
