#!/usr/bin/env python3

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.json import JSON

from .api import AppServicesClient
from .config import OUTPUT_DIR, ExportConfig, resolve_output_path
from .log import ExportLogger
from .transform import normalize_pending_users, normalize_users


class UsersExporter:
    def __init__(self, config: ExportConfig, client: AppServicesClient, log: ExportLogger,
                 output_dir: Path = OUTPUT_DIR):
        self.config = config
        self.client = client
        self.log = log
        self.output_dir = Path(output_dir)

    def fetch_users(self) -> List[Dict[str, Any]]:
        """Fetch every active user and normalize it"""
        self.log.info("Fetching users...")
        users = self.client.get_all_users(self.config.group_id, self.config.app_id)
        self.log.info(f"Total users fetched: {len(users)}")
        return normalize_users(users)

    def fetch_pending_users(self) -> List[Dict[str, Any]]:
        """Fetch every pending user, stamped with the configured creation date"""
        self.log.info("Fetching pending users...")
        pending_users = self.client.get_all_pending_users(self.config.group_id, self.config.app_id)
        self.log.info(f"Total pending users fetched: {len(pending_users)}")
        self.log.debug(f"Using {self.config.pending_user_date} as the creation date for pending users")
        return normalize_pending_users(pending_users, self.config.pending_user_timestamp)

    def build_envelope(self, users: List[Dict[str, Any]], pending_users: List[Dict[str, Any]],
                       export_date: Optional[datetime] = None) -> Dict[str, Any]:
        export_date = export_date or datetime.now(timezone.utc)
        return {
            'metadata': {
                'exportDate': export_date.isoformat(),
                'groupId': self.config.group_id,
                'appId': self.config.app_id,
                'totalUsers': len(users),
                'totalPendingUsers': len(pending_users),
                'pendingUserDate': self.config.pending_user_date,
            },
            'users': users,
            'pendingUsers': pending_users,
        }

    def write_export(self, envelope: Dict[str, Any]) -> Path:
        """Write the envelope as pretty-printed JSON inside the output directory"""
        output_path = resolve_output_path(self.config.output_file, self.output_dir)
        # Serialize before touching the file so a failure leaves nothing behind
        content = json.dumps(envelope, indent=2, ensure_ascii=False)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content + '\n', encoding='utf-8')

        self.log.success(f"Export saved to: {output_path}")
        return output_path

    def print_summary(self, envelope: Dict[str, Any]) -> None:
        console = self.log.console
        if self.config.dry_run:
            self.log.warning("Dry run: no file will be written")
        else:
            self.log.info("No outputFile given: printing a summary instead of writing a file")

        console.print("\n📄 [bold cyan]Metadata:[/bold cyan]")
        console.print(JSON.from_data(envelope['metadata']))

        for label, key in (("Sample user", 'users'), ("Sample pending user", 'pendingUsers')):
            records = envelope[key]
            if records:
                console.print(f"\n👤 [bold cyan]{label}:[/bold cyan]")
                console.print(JSON.from_data(records[0]))
            else:
                console.print(f"\n👤 [bold cyan]{label}:[/bold cyan] [dim]None[/dim]")

    def run(self) -> Optional[Path]:
        """
        Authenticate, fetch both user sets and export them.

        Returns the written file, or None when only a summary was printed.
        """
        self.log.info("Starting export process...")
        self.client.login(self.config.username, self.config.api_key)

        users = self.fetch_users()
        pending_users = self.fetch_pending_users()
        envelope = self.build_envelope(users, pending_users)

        if self.config.should_write:
            return self.write_export(envelope)

        self.print_summary(envelope)
        return None
