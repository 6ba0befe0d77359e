from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used by the permission table."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    DEPT_MANAGER = "dept_manager"
    EMPLOYEE = "employee"
    CLIENT = "client"


class UserType(str, Enum):
    """Which table a principal lives in."""

    EMPLOYEE = "employee"
    CLIENT = "client"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    ON_LEAVE = "on_leave"
    SUSPENDED = "suspended"
    TERMINATED = "terminated"
    RETIRED = "retired"


class ProjectStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkspaceMemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"
    OBSERVER = "observer"


class MessageType(str, Enum):
    TEXT = "text"
    FILE = "file"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
