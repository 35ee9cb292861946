from sew4mi.models.enums.family_profile import ReminderFrequency


MAX_FAMILY_PROFILES = 20

REMINDER_INTERVAL_MONTHS = {
    ReminderFrequency.MONTHLY: 1,
    ReminderFrequency.QUARTERLY: 3,
    ReminderFrequency.BIANNUALLY: 6,
}
