# sew4mi/models/enums/user_role.py
import enum


class UserRole(str, enum.Enum):
    customer = "customer"
    tailor = "tailor"
    admin = "admin"
