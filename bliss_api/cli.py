# bliss_api/cli.py
from datetime import timedelta

import click
from flask import current_app
from werkzeug.security import generate_password_hash

from .extensions import db
from .model import AdminUser
from .seed import seed_catalog
from .services.reconciliation import reconcile_checkouts

@click.command("create-admin")
@click.option("--email", default=None, help="Defaults to ADMIN_EMAIL")
@click.option("--password", default=None, help="Defaults to ADMIN_PASSWORD")
@click.option("--name", default="Admin")
def create_admin(email, password, name):
    email = (email or current_app.config.get("ADMIN_EMAIL") or "").strip().lower()
    password = password or current_app.config.get("ADMIN_PASSWORD")
    if not email or not password:
        raise click.UsageError("email and password are required (flags or ADMIN_EMAIL/ADMIN_PASSWORD)")
    if AdminUser.query.filter_by(email=email).first():
        click.echo("Email already exists"); return
    u = AdminUser(email=email, name=name, password_hash=generate_password_hash(password))
    db.session.add(u); db.session.commit()
    click.echo(f"Admin created: {u.id} {u.email}")

@click.command("seed-catalog")
def seed_catalog_command():
    counts = seed_catalog()
    click.echo("Seeded " + ", ".join(f"{n} {k}" for k, n in counts.items()))

@click.command("reconcile-checkouts")
@click.option("--older-than-minutes", default=30, show_default=True, type=int)
def reconcile_checkouts_command(older_than_minutes):
    results = reconcile_checkouts(
        current_app.extensions["hubtel"],
        older_than=timedelta(minutes=older_than_minutes),
    )
    if not results:
        click.echo("No open checkout attempts"); return
    for r in results:
        line = f"{r['client_reference']}: {r['outcome']}"
        if r.get("provider_status"):
            line += f" (provider: {r['provider_status']})"
        if r.get("error"):
            line += f" ({r['error']})"
        click.echo(line)

def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(seed_catalog_command)
    app.cli.add_command(reconcile_checkouts_command)
