# commands.py

import click
from flask import current_app
from flask.cli import with_appcontext


@click.command('import-residents')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def import_residents(path):
    """Import residents from a CSV/TSV file"""
    import os

    with open(path, 'rb') as handle:
        content = handle.read()

    import_service = current_app.services.get('resident_import')
    result = import_service.import_file(os.path.basename(path), content)
    if result.is_failure:
        raise click.ClickException(result.error)

    summary = result.data
    click.echo(summary.message)
    for category, errors in summary.grouped_errors.items():
        if errors:
            click.echo(f'\n{category} ({len(errors)}):')
            for error in errors:
                click.echo(f'  - {error}')

    if summary.missing_apartments:
        click.echo('\nMissing apartments can be created with create-block or the '
                   '/residents/import/missing-apartments endpoint.')


@click.command('create-block')
@click.argument('name')
@click.option('--apartments', default=0, show_default=True, help='Number of apartments to generate')
@with_appcontext
def create_block(name, apartments):
    """Create a block with generated apartments"""
    block_service = current_app.services.get('block')
    result = block_service.create_block(name, apartments)
    if result.is_failure:
        raise click.ClickException(result.error)
    click.echo(f'Block "{result.data["name"]}" created with {result.data["apartment_count"]} apartments')


@click.command('delete-residents')
@click.option('--yes', is_flag=True, help='Confirm deletion of every resident')
@with_appcontext
def delete_residents(yes):
    """Delete all residents"""
    if not yes:
        click.confirm('This will delete ALL residents and their payments. Continue?', abort=True)

    resident_service = current_app.services.get('resident')
    result = resident_service.delete_all_residents()
    if result.is_failure:
        raise click.ClickException(result.error)
    current_app.services.get('property_cache').clear()
    click.echo(f'Deleted {result.data} residents')


def init_app(app):
    """Register commands with the Flask app"""
    app.cli.add_command(import_residents)
    app.cli.add_command(create_block)
    app.cli.add_command(delete_residents)
