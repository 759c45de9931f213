"""devsync CLI main entry point.

Decodes sync attachment files for inspection. The CLI never sends anything.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from device_sync.core.field_update import to_optional
from device_sync.core.records import ContactRecord, GroupRecord
from device_sync.sync.codec import DecodeStats, iter_contacts, iter_groups
from device_sync.utils.config import get_config

console = Console()

app = typer.Typer(
    name="devsync",
    help="Device sync - inspect contacts and groups sync attachments",
    no_args_is_help=True,
)


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)
    else:
        logging.basicConfig(level=logging.WARNING, stream=sys.stderr)


def _open_attachment(path: Path) -> Any:
    if not path.is_file():
        typer.secho(f"File not found: {path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    return path.open("rb")


def contact_to_dict(record: ContactRecord) -> dict[str, Any]:
    """Flatten a contact record for display."""
    verified = to_optional(record.verified)
    profile_key = to_optional(record.profile_key)
    avatar = to_optional(record.avatar)
    return {
        "aci": record.address.aci,
        "number": record.address.number,
        "name": to_optional(record.name),
        "color": to_optional(record.color),
        "blocked": record.blocked,
        "archived": record.archived,
        "expiration_timer": to_optional(record.expiration_timer),
        "inbox_position": to_optional(record.inbox_position),
        "verified": verified.state.name.lower() if verified else None,
        "has_profile_key": profile_key is not None,
        "avatar": {"content_type": avatar.content_type, "length": avatar.length} if avatar else None,
    }


def group_to_dict(record: GroupRecord) -> dict[str, Any]:
    """Flatten a group record for display."""
    avatar = to_optional(record.avatar)
    return {
        "id": record.group_id.hex(),
        "name": to_optional(record.name),
        "members": [m.number for m in record.members],
        "active": record.active,
        "color": to_optional(record.color),
        "blocked": record.blocked,
        "archived": record.archived,
        "expiration_timer": to_optional(record.expiration_timer),
        "inbox_position": to_optional(record.inbox_position),
        "avatar": {"content_type": avatar.content_type, "length": avatar.length} if avatar else None,
    }


def _flag(value: bool) -> str:
    return "[red]yes[/red]" if value else "-"


def _print_summary(kind: str, stats: DecodeStats) -> None:
    typer.echo(f"{stats.decoded} {kind} decoded, {stats.skipped} skipped")
    if stats.truncated:
        typer.secho("Stream ended early: attachment is truncated or damaged", fg=typer.colors.YELLOW)


@app.command("inspect-contacts")
def inspect_contacts(
    path: Annotated[Path, typer.Argument(help="Contacts sync attachment file")],
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log decoding details")] = False,
) -> None:
    """Decode a contacts sync attachment and list its records.

    Examples:
        devsync inspect-contacts contacts.bin
        devsync inspect-contacts contacts.bin --json
    """
    _setup_logging(verbose)
    config = get_config()
    stats = DecodeStats()

    with _open_attachment(path) as source:
        rows = [
            contact_to_dict(record)
            for record in iter_contacts(
                source,
                max_record_size=config.max_record_size,
                max_avatar_size=config.max_avatar_size,
                stats=stats,
            )
        ]

    if json_output:
        data = {"contacts": rows, "skipped": stats.skipped, "truncated": stats.truncated}
        typer.echo(json.dumps(data, indent=2))
        return

    table = Table(title="Contacts", title_style="bold cyan", border_style="bright_black")
    table.add_column("Address", overflow="fold")
    table.add_column("Name", overflow="fold")
    table.add_column("Blocked", width=7)
    table.add_column("Archived", width=8)
    table.add_column("Timer", width=6)
    table.add_column("Verified", width=10)
    table.add_column("Avatar", width=8)

    for row in rows:
        avatar = row["avatar"]
        table.add_row(
            row["number"] or row["aci"],
            row["name"] or "-",
            _flag(row["blocked"]),
            _flag(row["archived"]),
            str(row["expiration_timer"] or "-"),
            row["verified"] or "-",
            f"{avatar['length']}B" if avatar else "-",
        )

    if rows:
        console.print(table)
    _print_summary("contacts", stats)


@app.command("inspect-groups")
def inspect_groups(
    path: Annotated[Path, typer.Argument(help="Groups sync attachment file")],
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log decoding details")] = False,
) -> None:
    """Decode a groups sync attachment and list its records.

    Examples:
        devsync inspect-groups groups.bin
        devsync inspect-groups groups.bin --json
    """
    _setup_logging(verbose)
    config = get_config()
    stats = DecodeStats()

    with _open_attachment(path) as source:
        rows = [
            group_to_dict(record)
            for record in iter_groups(
                source,
                max_record_size=config.max_record_size,
                max_avatar_size=config.max_avatar_size,
                stats=stats,
            )
        ]

    if json_output:
        data = {"groups": rows, "skipped": stats.skipped, "truncated": stats.truncated}
        typer.echo(json.dumps(data, indent=2))
        return

    table = Table(title="Groups", title_style="bold cyan", border_style="bright_black")
    table.add_column("Id", overflow="fold")
    table.add_column("Name", overflow="fold")
    table.add_column("Members", width=7)
    table.add_column("Active", width=6)
    table.add_column("Blocked", width=7)
    table.add_column("Archived", width=8)

    for row in rows:
        table.add_row(
            row["id"],
            row["name"] or "-",
            str(len(row["members"])),
            "yes" if row["active"] else "[yellow]no[/yellow]",
            _flag(row["blocked"]),
            _flag(row["archived"]),
        )

    if rows:
        console.print(table)
    _print_summary("groups", stats)


@app.command()
def version() -> None:
    """Show version information."""
    from device_sync import __version__

    typer.echo(f"device-sync v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
