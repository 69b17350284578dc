import click

from .errors import ApiError
from .extensions import db
from .messages import localize
from .services import get_auth_service


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-user")
    @click.argument("name")
    @click.argument("account_id")
    @click.password_option()
    def create_user(name, account_id, password):
        """Register a user with the same rules as the API."""
        try:
            user = get_auth_service().register(name, account_id, password)
        except ApiError as e:
            raise click.ClickException(localize(e.message_key, "en"))
        click.echo(f"Created user {user.id}: {user.account_id}")
