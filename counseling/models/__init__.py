"""Database models package."""

from counseling.models.academic import AcademicRecord
from counseling.models.attendance import AttendanceRecord, AttendanceStatus
from counseling.models.behavior import BehaviorLog, BehaviorType, Severity
from counseling.models.follow_up import FollowUpTask, TaskPriority
from counseling.models.interview import InterviewRecord, InterviewType
from counseling.models.scale import ScaleResult
from counseling.models.student import Student

__all__ = [
    # Student
    "Student",
    # Academic results
    "AcademicRecord",
    # Behavior
    "BehaviorLog",
    "BehaviorType",
    "Severity",
    # Interviews
    "InterviewRecord",
    "InterviewType",
    # Attendance
    "AttendanceRecord",
    "AttendanceStatus",
    # Follow-up tasks
    "FollowUpTask",
    "TaskPriority",
    # Psychometric scales
    "ScaleResult",
]
