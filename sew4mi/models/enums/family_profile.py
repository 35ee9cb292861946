# sew4mi/models/enums/family_profile.py
import enum


class RelationshipType(str, enum.Enum):
    SELF = "SELF"
    SPOUSE = "SPOUSE"
    CHILD = "CHILD"
    PARENT = "PARENT"
    SIBLING = "SIBLING"
    OTHER = "OTHER"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class ProfileVisibility(str, enum.Enum):
    PRIVATE = "PRIVATE"
    FAMILY_ONLY = "FAMILY_ONLY"
    PUBLIC = "PUBLIC"


class ReminderFrequency(str, enum.Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    BIANNUALLY = "BIANNUALLY"
    NEVER = "NEVER"
