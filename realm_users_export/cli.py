#!/usr/bin/env python3
"""
CLI for exporting App Services users ahead of a migration.
"""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .api import AppServicesClient, HttpClient
from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_PENDING_USER_DATE,
    ENV_API_KEY,
    ENV_APP_ID,
    ENV_GROUP_ID,
    ENV_USERNAME,
    load_config,
    load_credentials,
    load_environment,
)
from .exporter import UsersExporter
from .log import ExportLogger

console = Console()


def print_banner():
    """Print the banner using rich."""
    banner_panel = Panel(
        "[bold white]🚀 Realm Users Export[/bold white]\n\n"
        "Export App Services users and pending users to JSON for migration",
        title="",
        border_style="cyan",
        padding=(1, 2)
    )
    console.print(banner_panel)


def setup_credentials(env_path: str = '.env'):
    """Interactive setup of Atlas credentials."""
    console.print("\n🔧 [bold green]Setting up MongoDB Atlas credentials[/bold green]")

    help_panel = Panel(
        "[bold]You'll need a programmatic API key for your Atlas project:[/bold]\n\n"
        "1. Go to Atlas > Project Settings > Access Manager > API Keys\n"
        "2. Create an API key with the Project Owner role\n"
        "3. Copy the public key (username) and private key (API key)\n"
        "4. Find the group (project) ID and the App Services app ID\n\n"
        "[dim]Tip: run with --listApps to look up the app ID.[/dim]",
        title="📚 Setup Guide",
        border_style="blue"
    )
    console.print(help_panel)

    username = Prompt.ask("🔑 Public API key (username)")
    api_key = Prompt.ask("🔐 Private API key", password=True)
    group_id = Prompt.ask("🏢 Group (project) ID")
    app_id = Prompt.ask("📱 App Services app ID (leave empty if unknown)", default="")

    env_content = f"""# MongoDB Atlas App Services API Configuration
{ENV_USERNAME}={username}
{ENV_API_KEY}={api_key}
{ENV_GROUP_ID}={group_id}
{ENV_APP_ID}={app_id}
"""

    with open(env_path, 'w', encoding='utf-8') as f:
        f.write(env_content)

    console.print(f"\n✅ [bold green]Credentials saved to {env_path}[/bold green]")


def display_apps(apps: list):
    """Display the apps of a group in a table."""
    if not apps:
        console.print("❌ [red]No apps found in this group.[/red]")
        return

    apps_table = Table(title="📱 App Services Apps", show_header=True, header_style="bold yellow")
    apps_table.add_column("Name", style="yellow")
    apps_table.add_column("Client App ID", style="cyan")
    apps_table.add_column("App ID", style="dim")

    for app in apps:
        apps_table.add_row(
            app.get('name', 'N/A'),
            app.get('client_app_id', 'N/A'),
            app.get('_id', 'N/A'),
        )

    console.print(apps_table)
    console.print(f"\n✅ Found {len(apps)} apps total")


def list_apps(log: ExportLogger, env: Optional[str]):
    load_environment(env)
    credentials = load_credentials((ENV_USERNAME, ENV_API_KEY, ENV_GROUP_ID))

    http = HttpClient()
    try:
        client = AppServicesClient(http, log)
        client.login(credentials[ENV_USERNAME], credentials[ENV_API_KEY])
        apps = client.list_apps(credentials[ENV_GROUP_ID])
    finally:
        http.close()

    display_apps(apps)


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--dryRun', 'dry_run', is_flag=True, default=False,
              help='Fetch everything but only print a summary')
@click.option('--verbose', is_flag=True, default=False, help='Show debug output')
@click.option('--batchSize', 'batch_size', default=str(DEFAULT_BATCH_SIZE), show_default=True,
              help='Batch size (accepted for compatibility; pages are sized by the server)')
@click.option('--outputFile', 'output_file', help='Output filename, written inside the exports/ directory')
@click.option('--pendingUserDate', 'pending_user_date', default=DEFAULT_PENDING_USER_DATE, show_default=True,
              help='Creation date (YYYY-MM-DD) recorded for pending users')
@click.option('--env', help='Path to custom .env file (default: .env in current directory)')
@click.option('--listApps', 'list_apps_only', is_flag=True, help='List the apps in the group and exit')
@click.option('--setup', is_flag=True, help='Setup credentials interactively')
@click.version_option(version=__version__, prog_name="realm-users-export")
def main(dry_run: bool, verbose: bool, batch_size: str, output_file: Optional[str],
         pending_user_date: str, env: Optional[str], list_apps_only: bool, setup: bool):
    """
    🚀 Export App Services users and pending users to JSON.

    Credentials are read from ATLAS_USERNAME, ATLAS_API_KEY, ATLAS_GROUP_ID
    and ATLAS_APP_ID (environment or .env file).

    Examples:
      realm-users-export --dryRun                          # Fetch and print a summary
      realm-users-export --outputFile users.json           # Write exports/users.json
      realm-users-export --outputFile users.json --pendingUserDate 2023-06-01
      realm-users-export --listApps                        # Look up the app ID
      realm-users-export --env /path/to/my.env --verbose
    """
    print_banner()
    log = ExportLogger(verbose=verbose, console=console)

    if setup:
        setup_credentials(env or '.env')
        if not Confirm.ask("Continue with export?", default=True):
            return

    try:
        if list_apps_only:
            list_apps(log, env)
            return

        config = load_config(
            dry_run=dry_run,
            verbose=verbose,
            batch_size=batch_size,
            output_file=output_file,
            pending_user_date=pending_user_date,
            env_file_path=env,
        )
        log.debug(f"Batch size {config.batch_size} is not sent to the API; page size is set by the server")

        http = HttpClient()
        try:
            exporter = UsersExporter(config, AppServicesClient(http, log), log)
            output_path = exporter.run()
        finally:
            http.close()

        if output_path:
            console.print("\n🎉 [bold green]Export completed successfully![/bold green]")
        else:
            console.print("\n🎉 [bold green]Summary completed successfully![/bold green]")

    except KeyboardInterrupt:
        log.warning("Export cancelled by user")
        sys.exit(1)
    except Exception as e:
        log.error(f"Export failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
