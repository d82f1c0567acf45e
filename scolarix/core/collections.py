"""Listing configuration per collection, checked against the models at import time."""
from scolarix.core.models import (
    Average,
    Composition,
    EvaluationType,
    Note,
    Result,
    School,
    SchoolClass,
    SchoolYear,
    Student,
    User,
)
from scolarix.core.query_builder import CollectionConfig

USERS = CollectionConfig(
    searchable_fields=("username",),
    protected_fields=("password_hash",),
).validate(User)

SCHOOLS = CollectionConfig(searchable_fields=("name", "city", "inspection_district")).validate(School)

SCHOOL_YEARS = CollectionConfig(searchable_fields=("label",)).validate(SchoolYear)

CLASSES = CollectionConfig(searchable_fields=("label",)).validate(SchoolClass)

STUDENTS = CollectionConfig(searchable_fields=("last_name", "first_name")).validate(Student)

EVALUATION_TYPES = CollectionConfig(searchable_fields=("name",)).validate(EvaluationType)

COMPOSITIONS = CollectionConfig(searchable_fields=("label",)).validate(Composition)

NOTES = CollectionConfig().validate(Note)

AVERAGES = CollectionConfig().validate(Average)

RESULTS = CollectionConfig().validate(Result)
