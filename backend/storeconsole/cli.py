# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/storeconsole/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create missing tables and the default app settings row.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Admin bootstrap/inspection:
# - python -m flask admins make-super-admin --email owner@example.com [--password "secret1"]
#   Promote an identity to super_admin (creates the identity when --password is given).
# - python -m flask admins list
#   List admin records with role and active status.
#
# Catalog maintenance:
# - python -m flask catalog seed-categories
#   Create the starter categories that do not exist yet (matched by name).
# - python -m flask catalog reconcile-lists
#   Rebuild product_lists from products (missing, stale and orphaned rows).
# - python -m flask catalog export-pdf --out catalog.pdf [--scope available]
# - python -m flask catalog export-csv --out products.csv [--scope active]
#   Write the same exports the product-list screen offers.

import click
from flask.cli import with_appcontext

from .errors import ConsoleError
from .extensions import db
from .models import AdminUser, Category
from .seed_catalog import DEFAULT_CATEGORIES
from .services import access_service, auth_service, export_service, products_service, settings_service, taxonomy_service
from .services.auth_service import IdentityError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the console database.

    Creates:
    - All tables (if missing)
    - The app_settings row with defaults (sign-up enabled)
    """
    click.echo("START Initializing store console...")
    db.create_all()
    click.echo("PASS Tables ready")

    settings = settings_service.get_app_settings()
    click.echo(f"PASS App settings ready (show_sign_up={settings.show_sign_up})")
    click.echo("NEXT Run 'python -m flask admins make-super-admin' to create the first super admin.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('admins')
def admins_group():
    """Admin bootstrap and inspection commands."""


@admins_group.command('make-super-admin')
@click.option('--email', prompt=True, help='Email address of the identity')
@click.option('--password', default=None, help='Create the identity with this password if it does not exist')
@click.option('--name', default=None, help='Display name for a new identity')
@with_appcontext
def make_super_admin_cli(email, password, name):
    """
    Promote an identity to super_admin (created_by="system").

    Without --password the identity must already exist.
    """
    identity = auth_service.find_identity_by_email(email)
    try:
        if identity is None:
            if not password:
                click.echo(f"FAIL No identity found for {email}. Pass --password to create it.")
                return
            identity = auth_service.create_identity(email, password, display_name=name)
            click.echo(f"PASS Created identity: {identity.email} (ID: {identity.id})")

        record = access_service.make_super_admin(identity, created_by=access_service.CREATED_BY_SYSTEM)
    except (IdentityError, ConsoleError) as e:
        click.echo(f"FAIL {e.message}")
        return

    click.echo(f"PASS {record.email} is now super_admin")


@admins_group.command('list')
@with_appcontext
def list_admins():
    """List all admin records."""
    admins = db.session.query(AdminUser).order_by(AdminUser.email).all()

    if not admins:
        click.echo("No admins found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<34} {'Email':<30} {'Role':<12} {'Active':<8} {'Created by'}")
    click.echo("="*100)

    for admin in admins:
        active_str = "Yes" if admin.is_active else "No"
        click.echo(f"{admin.id:<34} {admin.email:<30} {admin.role:<12} {active_str:<8} {admin.created_by}")

    click.echo("="*100 + "\n")


@click.group('catalog')
def catalog_group():
    """Catalog maintenance commands."""


@catalog_group.command('seed-categories')
@with_appcontext
def seed_categories():
    """Create starter categories; existing names are skipped."""
    existing = {name for (name,) in db.session.query(Category.name).all()}
    created = 0
    for entry in DEFAULT_CATEGORIES:
        if entry["name"] in existing:
            click.echo(f"SKIP {entry['name']} already exists")
            continue
        try:
            category = taxonomy_service.create_category(
                name=entry["name"],
                description=entry["description"],
                sub_categories=entry["sub_categories"],
            )
        except ConsoleError as e:
            click.echo(f"FAIL {entry['name']}: {e.message}")
            continue
        created += 1
        click.echo(f"PASS Created {category.name} with {len(category.sub_categories)} sub-categories")

    click.echo(f"DONE {created} categories created")


@catalog_group.command('reconcile-lists')
@with_appcontext
def reconcile_lists():
    """Repair the product_lists mirror after partial write failures."""
    try:
        result = products_service.reconcile_product_lists()
    except ConsoleError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(
        f"PASS product_lists reconciled: created={result['created']} "
        f"updated={result['updated']} deleted={result['deleted']}"
    )


@catalog_group.command('export-pdf')
@click.option('--out', 'out_path', default=None, help='Output file (default: <store>-Catalog-<date>.pdf)')
@click.option('--scope', type=click.Choice(export_service.PDF_SCOPES), default='all', show_default=True)
@click.option('--category', default=None, help='Category name for --scope category')
@with_appcontext
def export_pdf(out_path, scope, category):
    """Write the catalog PDF."""
    rows = export_service.select_for_pdf(products_service.list_product_lists(), scope, category)
    if not rows:
        click.echo("FAIL No products to export")
        return

    store_name = settings_service.store_name()
    document = export_service.render_pdf(export_service.build_report(rows), store_name)
    out_path = out_path or export_service.pdf_filename(store_name)
    with open(out_path, "wb") as f:
        f.write(document)
    click.echo(f"PASS Wrote {len(rows)} products to {out_path}")


@catalog_group.command('export-csv')
@click.option('--out', 'out_path', default=None, help='Output file (default: product-list-<scope>-<date>.csv)')
@click.option('--scope', type=click.Choice(export_service.CSV_SCOPES), default='all', show_default=True)
@with_appcontext
def export_csv(out_path, scope):
    """Write the product-list CSV."""
    rows = export_service.select_for_csv(products_service.list_product_lists(), scope)
    if not rows:
        click.echo("FAIL No products to export")
        return

    out_path = out_path or export_service.csv_filename(scope)
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        f.write(export_service.render_csv(rows))
    click.echo(f"PASS Wrote {len(rows)} products to {out_path}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(admins_group)
    app.cli.add_command(catalog_group)
