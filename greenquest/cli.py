"""CLI commands for Flask application."""

import click
from flask.cli import with_appcontext


@click.group()
def gamification():
    """Badge, reward catalog and level maintenance commands."""
    pass


@gamification.command("seed-badges")
@with_appcontext
def seed_badges():
    """Create or refresh the default badge catalog."""
    from greenquest.services import BadgeService

    created = BadgeService().seed_default_badges()
    click.echo(f"Badges seeded ({created} new)")


@gamification.command("seed-catalog")
@with_appcontext
def seed_catalog():
    """Create the default reward catalog items."""
    from greenquest.services import RewardService

    created = RewardService().seed_default_catalog()
    click.echo(f"Reward catalog seeded ({created} new)")


@gamification.command("recalculate-levels")
@with_appcontext
def recalculate_levels():
    """Recompute every user's level from their progress."""
    from greenquest.models import User
    from greenquest.services import LevelService

    service = LevelService()
    leveled = 0
    for user in User.query.order_by(User.id).all():
        result = service.update_user_level(user.id)
        if result["level_up"]:
            leveled += 1
            click.echo(
                f"  user {user.id}: {result['old_level']} -> {result['new_level']}"
            )
    click.echo(f"Done! {leveled} users leveled up")


@gamification.command("award-badges")
@click.option("--user-id", type=int, default=None, help="Only this user")
@with_appcontext
def award_badges(user_id):
    """Award any badges users already qualify for."""
    from greenquest.models import User
    from greenquest.services import BadgeService

    service = BadgeService()
    if user_id is not None:
        user_ids = [user_id]
    else:
        user_ids = [u.id for u in User.query.order_by(User.id).all()]

    total = 0
    for uid in user_ids:
        awarded = service.award_user_badges(uid)
        if awarded:
            total += len(awarded)
            names = ", ".join(b.name for b in awarded)
            click.echo(f"  user {uid}: {names}")
    click.echo(f"Done! {total} badges awarded")
