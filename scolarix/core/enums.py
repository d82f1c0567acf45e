from enum import Enum


class UserRole(str, Enum):
    ADMINISTRATOR = "Administrator"
    TEACHER = "Teacher"
    OTHER = "OtherRole"


class Gender(str, Enum):
    M = "M"
    F = "F"


class CompositionType(str, Enum):
    MONTHLY = "Monthly"
    PROGRAMME = "Programme"
    PASSAGE = "Passage"


class Decision(str, Enum):
    ADMITTED = "Admitted"
    REFUSED = "Refused"
    PASSAGE = "Passage"
