import logging
import subprocess

import click
from pydantic import ValidationError

from careerflow.app.api.routes.route_logic import user_crud
from careerflow.app.database.database import get_session_local
from careerflow.app.schemas.user import UserCreate

log = logging.getLogger(__name__)


def _run_alembic(command: list[str], success_msg: str, action: str) -> None:
    """Run an alembic subcommand and report the outcome on the console."""
    try:
        subprocess.run(command, check=True)
        click.echo(success_msg)
        log.info(success_msg)
    except subprocess.CalledProcessError as e:
        _error_msg = f"An error occurred while {action}: {e}"
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
    except FileNotFoundError:
        _error_msg = "Error: 'alembic' command not found. Make sure Alembic is installed and in your PATH."
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def cli(debug: bool):
    """Management script for the CareerFlow application."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("generate-migration")
@click.option(
    "-m",
    "--message",
    required=True,
    help="A short message describing the migration.",
)
def generate_migration(message: str):
    """
    Generate a new database migration script.

    This command wraps 'alembic revision --autogenerate'.

    Args:
        message (str): A short message describing the migration.

    """
    _msg = "generate_migration starting"
    log.debug(_msg)
    click.echo("Generating new migration...")
    _run_alembic(
        ["alembic", "revision", "--autogenerate", "-m", message],
        f"Successfully generated new migration: {message}",
        "generating migration",
    )


@cli.command("apply-migrations")
def apply_migrations():
    """
    Apply all pending migrations to the database.

    This command wraps 'alembic upgrade head'.
    """
    _msg = "apply_migrations starting"
    log.debug(_msg)
    click.echo("Applying database migrations...")
    _run_alembic(
        ["alembic", "upgrade", "head"],
        "Successfully applied all migrations.",
        "applying migrations",
    )


@cli.command("create-user")
@click.option("--username", required=True, help="Username for the new user.")
@click.option("--email", required=True, help="Email address for the new user.")
@click.option(
    "--password",
    required=True,
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password for the new user.",
)
def create_user(username: str, email: str, password: str):
    """
    Create a user account.

    Args:
        username (str): The username for the new user.
        email (str): The email address for the new user.
        password (str): The password for the new user, at least 8 characters.

    Notes:
        1. Validate the input with the registration schema.
        2. Refuse a username or email that is already registered.
        3. Create the user and print a success or error message.

    """
    _msg = "create_user starting"
    log.debug(_msg)

    try:
        user_data = UserCreate(username=username, email=email, password=password)
    except ValidationError as e:
        click.echo(f"Invalid user data: {e}", err=True)
        raise SystemExit(1) from e

    click.echo(f"Creating user '{username}'...")
    db_session_local = get_session_local()
    db = db_session_local()
    try:
        if user_crud.get_user_by_username(db, username):
            click.echo(f"Username '{username}' is already registered.", err=True)
            raise SystemExit(1)
        if user_crud.get_user_by_email(db, email):
            click.echo(f"Email '{email}' is already registered.", err=True)
            raise SystemExit(1)
        user = user_crud.create_new_user(db, user_data)
        _success_msg = f"User '{user.username}' created successfully."
        click.echo(_success_msg)
        log.info(_success_msg)
    finally:
        db.close()

    _msg = "create_user returning"
    log.debug(_msg)


def main():
    """Run the command line interface."""
    cli()


if __name__ == "__main__":
    main()
