"""Flask CLI commands for admin operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development databases without migrations)."""
        from catalog.extensions import db

        db.create_all()
        click.echo(f"Database initialized at {current_app.config['SQLALCHEMY_DATABASE_URI'].split('@')[-1]}.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed a demo category tree, products, variants and attributes (idempotent)."""
        from catalog.seed import seed_demo as run_seed

        run_seed(echo=click.echo)

    @app.cli.command("issue-token")
    @click.option(
        "--role",
        type=click.Choice(["ADMIN", "SELLER", "CUSTOMER"], case_sensitive=False),
        default="SELLER",
        show_default=True,
    )
    @click.option("--seller-id", type=int, default=None, help="Required for SELLER")
    @click.option("--user-id", type=int, default=None)
    def issue_token(role, seller_id, user_id):
        """Print a signed access token for local testing."""
        from catalog.auth import issue_token as sign

        if role.upper() == "SELLER" and seller_id is None:
            raise click.UsageError("--seller-id is required for SELLER tokens")
        click.echo(sign(role, seller_id=seller_id, user_id=user_id))

    @app.cli.command("stats")
    def stats():
        """Show live variant counts per product."""
        from catalog.services.product_service import get_stats

        rows = get_stats()
        click.echo(f"Total products: {len(rows)}")
        for sku, name, count in rows:
            click.echo(f"  {sku} ({name}): {count} variant(s)")
