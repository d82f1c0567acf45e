from scolarix.auth.models import User
from scolarix.core.models.average import Average
from scolarix.core.models.class_model import SchoolClass
from scolarix.core.models.composition import Composition
from scolarix.core.models.evaluation_type import EvaluationType
from scolarix.core.models.note import Note
from scolarix.core.models.result import Result
from scolarix.core.models.school import School
from scolarix.core.models.school_year import SchoolYear
from scolarix.core.models.student import Student

__all__ = [
    "Average",
    "Composition",
    "EvaluationType",
    "Note",
    "Result",
    "School",
    "SchoolClass",
    "SchoolYear",
    "Student",
    "User",
]
