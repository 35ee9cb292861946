from sqlalchemy.ext.asyncio import AsyncSession
from sew4mi.models.support.activity_models import UserActivity
from sew4mi.constants.activity_templates import ACTIVITY_TEMPLATES
from sew4mi.constants.activity_codes import ActivityCode


def actor_context(user) -> dict:
    """Template fields shared by every user-initiated activity."""
    return {
        "actor_role": user.role.capitalize(),
        "actor_email": user.email,
    }


async def emit_activity(
    db: AsyncSession,
    *,
    user_id: int | None,
    username: str,
    code: ActivityCode,
    **context,
):
    template = ACTIVITY_TEMPLATES.get(code)
    if not template:
        raise ValueError(f"No activity template for code {code}")

    try:
        message = template.format(**context)
    except KeyError as e:
        raise ValueError(
            f"Missing activity context key: {e.args[0]} for {code}"
        )

    db.add(
        UserActivity(
            user_id=user_id,
            username_snapshot=username,
            code=code.value,
            message=message,
        )
    )
