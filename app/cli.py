import click
from flask.cli import with_appcontext
from sqlalchemy import func
from app.extensions import db
from app.models import User, AdminUser

def _find_user(email: str):
    return db.session.execute(
        db.select(User).where(func.lower(User.email) == email.strip().lower())
    ).scalar_one_or_none()

@click.group()
def users():
    """User management."""

@users.command("create")
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--admin", "make_admin", is_flag=True, help="Also grant admin")
@with_appcontext
def users_create(email, password, make_admin):
    if _find_user(email):
        raise click.ClickException("User already exists")

    user = User(email=email.strip().lower(), is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()

    if make_admin:
        db.session.add(AdminUser(user_id=user.id, email=user.email))
    db.session.commit()

    click.echo(f"User created id={user.id} email={user.email} admin={'yes' if make_admin else 'no'}")

@click.group()
def admins():
    """Admin marker ops."""

@admins.command("grant")
@click.option("--email", required=True)
@with_appcontext
def admins_grant(email):
    user = _find_user(email)
    if not user:
        raise click.ClickException("User not found")
    if db.session.get(AdminUser, user.id):
        click.echo(f"{user.email} is already an admin")
        return
    db.session.add(AdminUser(user_id=user.id, email=user.email))
    db.session.commit()
    click.echo(f"Granted admin to {user.email}")

@admins.command("revoke")
@click.option("--email", required=True)
@with_appcontext
def admins_revoke(email):
    user = _find_user(email)
    if not user:
        raise click.ClickException("User not found")
    marker = db.session.get(AdminUser, user.id)
    if not marker:
        raise click.ClickException("Admin marker not found")
    db.session.delete(marker)
    db.session.commit()
    click.echo(f"Revoked admin from {user.email}")

@admins.command("list")
@with_appcontext
def admins_list():
    rows = db.session.execute(db.select(AdminUser).order_by(AdminUser.email)).scalars().all()
    if not rows:
        click.echo("No admins")
        return
    for row in rows:
        click.echo(f"{row.user_id}\t{row.email}")

def register_cli(app):
    app.cli.add_command(users)
    app.cli.add_command(admins)
