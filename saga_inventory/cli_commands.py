"""
Flask CLI commands for store maintenance.

Commands:
- flask init-db: Create any missing tables
- flask import-csv RESOURCE FILE: Bulk import a CSV file
"""

import click
from saga_inventory.database import create_schema, get_session
from saga_inventory.services.crud_service import SERVICES, get_service
from saga_inventory.services.import_service import get_import_spec, import_csv


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the schema in the configured store."""
        create_schema()
        click.echo(click.style('Schema ready.', fg='green'))

    @app.cli.command('import-csv')
    @click.argument('resource', type=click.Choice(sorted(SERVICES)))
    @click.argument('csv_file', type=click.File('r', encoding='utf-8-sig'))
    def import_csv_command(resource, csv_file):
        """Import RESOURCE rows from CSV_FILE, one row at a time."""
        service = get_service(resource, get_session())
        result = import_csv(
            csv_file.read(),
            get_import_spec(resource),
            service.create,
            error_preview=app.config.get('IMPORT_ERROR_PREVIEW', 3)
        )

        for error in result.errors:
            click.echo(click.style(f'  {error}', fg='yellow'))

        if result.aborted:
            click.echo(click.style('Import aborted, nothing imported.', fg='red'))
            raise SystemExit(1)

        color = 'green' if not result.failed else 'yellow'
        click.echo(click.style(
            f'{result.imported} {resource} imported successfully, {result.failed} failed',
            fg=color, bold=True
        ))
