from app.core.models.academic_year import AcademicYear
from app.core.models.activity_log import ActivityLog
from app.core.models.class_model import SchoolClass, class_students, class_subjects
from app.core.models.subject import Subject

__all__ = [
    "AcademicYear",
    "ActivityLog",
    "SchoolClass",
    "Subject",
    "class_students",
    "class_subjects",
]
