from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sew4mi.core.db import AsyncSessionLocal
from sew4mi.core.config import AUTO_APPROVAL_INTERVAL_MINUTES

from sew4mi.services.orders.milestone_service import auto_approve_expired_milestones
from sew4mi.services.profiles.family_profile_service import process_due_reminders

scheduler = AsyncIOScheduler()


@scheduler.scheduled_job("interval", minutes=AUTO_APPROVAL_INTERVAL_MINUTES, id="milestone_auto_approval")
async def auto_approve_milestones_job():
    async with AsyncSessionLocal() as db:
        await auto_approve_expired_milestones(db)


@scheduler.scheduled_job("cron", hour=7, minute=0, id="measurement_reminders")  # daily @ 07:00
async def measurement_reminders_job():
    async with AsyncSessionLocal() as db:
        await process_due_reminders(db)
