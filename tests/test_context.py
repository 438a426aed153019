from datetime import date, datetime

import pytest
from sqlalchemy.exc import InvalidRequestError

from school.core.exceptions import ConstraintViolationError, EntityValidationError
from school.data.context import EntityState, SchoolContext
from school.models.course import Course
from school.models.enrollment import Enrollment
from school.models.student import Student


def new_student(**overrides) -> Student:
    fields = dict(
        first_name="Alice",
        last_name="Wonderland",
        email="alice.wonderland@university.edu",
        date_of_birth=date(2002, 7, 4),
    )
    fields.update(overrides)
    return Student(**fields)


def new_course(**overrides) -> Course:
    fields = dict(
        course_code="CSCI340",
        title="Data Structures and Algorithms",
        description="Data Structures",
        credits=4,
    )
    fields.update(overrides)
    return Course(**fields)


def states(db):
    return {entry.entity: entry.state for entry in db.entries()}


# =============================================================================
# Add / save
# =============================================================================

def test_add_is_staged_until_saved(db, other_db):
    student = new_student()
    db.students.add(student)
    assert student.id is None
    assert other_db.students.count() == 3

    assert db.save_changes() == 1
    assert student.id is not None
    assert other_db.students.find(student.id).full_name == "Alice Wonderland"


def test_add_student_and_course_then_enroll(db, other_db):
    student, course = new_student(), new_course()
    db.students.add(student)
    db.courses.add(course)
    assert db.save_changes() == 2

    db.enrollments.add(Enrollment(student_id=student.id, course_id=course.id))
    db.save_changes()

    stored = other_db.enrollments.where(Enrollment.student_id == student.id).single()
    assert stored.course_id == course.id
    assert stored.grade is None
    assert isinstance(stored.enrollment_date, datetime)


def test_add_range(db, other_db):
    db.students.add_range([new_student(), new_student(first_name="Alicia")])
    assert db.save_changes() == 2
    assert other_db.students.where(Student.last_name == "Wonderland").count() == 2


def test_enrollment_linked_through_relationships(db):
    student, course = new_student(), new_course()
    enrollment = Enrollment(student=student, course=course, grade="A")
    db.enrollments.add(enrollment)

    assert db.save_changes() == 3
    assert enrollment.student_id == student.id
    assert enrollment.course_id == course.id


# =============================================================================
# Change tracking
# =============================================================================

def test_loaded_entities_are_unchanged(db):
    student = db.students.find(1)
    assert states(db)[student] is EntityState.UNCHANGED
    assert db.has_changes() is False


def test_mutation_is_detected_without_marking(db, other_db):
    student = db.students.find(1)
    student.email = "john.doe.updated@university.edu"

    assert states(db)[student] is EntityState.MODIFIED
    assert db.has_changes() is True
    assert db.save_changes() == 1
    assert other_db.students.find(1).email == "john.doe.updated@university.edu"


def test_setting_same_value_is_not_a_change(db):
    student = db.students.find(1)
    student.first_name = "John"
    assert states(db)[student] is EntityState.UNCHANGED
    assert db.save_changes() == 0


def test_entry_states(db):
    added = new_student()
    db.students.add(added)
    deleted = db.enrollments.find(5)
    db.enrollments.remove(deleted)

    tracked = states(db)
    assert tracked[added] is EntityState.ADDED
    assert tracked[deleted] is EntityState.DELETED


def test_removing_unsaved_entity_stops_tracking(db):
    student = new_student()
    db.students.add(student)
    db.students.remove(student)

    assert student not in states(db)
    assert db.save_changes() == 0


def test_discard_changes(db):
    student = db.students.find(2)
    student.email = "changed@university.edu"
    db.students.add(new_student())

    db.discard_changes()

    assert db.has_changes() is False
    assert db.students.find(2).email == "jane.smith@university.edu"
    assert db.students.count() == 3


def test_update_many(db, other_db):
    courses = db.courses.where(Course.credits == 3).to_list()
    for course in courses:
        course.credits = 4
    assert db.save_changes() == 3
    assert other_db.courses.where(Course.credits == 4).count() == 3


# =============================================================================
# Validation
# =============================================================================

def test_invalid_entity_blocks_whole_save(db, other_db):
    db.courses.add(new_course())
    db.students.add(new_student(email="not-an-email"))

    with pytest.raises(EntityValidationError) as exc_info:
        db.save_changes()

    details = exc_info.value.details
    assert len(details) == 1
    (key,) = details
    assert key.startswith("Student[new") and key.endswith(".email")
    assert other_db.courses.count() == 3

    # Nothing was dropped: fixing the entity lets the same unit of work save
    assert db.has_changes() is True
    for entry in db.entries():
        if isinstance(entry.entity, Student):
            entry.entity.email = "alice.wonderland@university.edu"
    assert db.save_changes() == 2
    assert other_db.courses.count() == 4


def test_invalid_update_is_rejected(db, other_db):
    course = db.courses.find(1)
    course.credits = 7

    with pytest.raises(EntityValidationError) as exc_info:
        db.save_changes()
    assert exc_info.value.details == {
        "Course[1].credits": "Input should be less than or equal to 6"
    }
    assert other_db.courses.find(1).credits == 3


def test_saved_course_description_cannot_be_cleared(db, other_db):
    course = db.courses.find(1)
    course.description = None

    with pytest.raises(EntityValidationError) as exc_info:
        db.save_changes()
    assert list(exc_info.value.details) == ["Course[1].description"]
    assert other_db.courses.find(1).description == "C#"


def test_new_course_without_description_gets_empty_one(db, other_db):
    course = new_course(description=None)
    db.courses.add(course)
    assert db.save_changes() == 1
    assert other_db.courses.find(course.id).description == ""


# =============================================================================
# Constraints
# =============================================================================

def test_duplicate_enrollment_is_rejected(db, other_db):
    db.enrollments.add(Enrollment(student_id=3, course_id=1))
    db.save_changes()

    db.enrollments.add(Enrollment(student_id=3, course_id=1))
    with pytest.raises(ConstraintViolationError) as exc_info:
        db.save_changes()
    assert exc_info.value.code == "CONSTRAINT_VIOLATION"
    assert other_db.enrollments.where(Enrollment.student_id == 3).count() == 2


def test_same_student_other_course_is_accepted(db):
    db.enrollments.add(Enrollment(student_id=3, course_id=1))
    db.enrollments.add(Enrollment(student_id=3, course_id=3))
    assert db.save_changes() == 2


def test_missing_parent_is_rejected(db, other_db):
    db.enrollments.add(Enrollment(student_id=999, course_id=1))
    with pytest.raises(ConstraintViolationError):
        db.save_changes()
    assert other_db.enrollments.count() == 5


def test_failed_save_writes_nothing(db, other_db):
    db.students.add(new_student())
    db.enrollments.add(Enrollment(student_id=1, course_id=1))  # already enrolled

    with pytest.raises(ConstraintViolationError):
        db.save_changes()

    assert other_db.students.count() == 3
    assert db.has_changes() is False


# =============================================================================
# Delete / cascade
# =============================================================================

def test_delete_student_cascades(db, other_db):
    student = db.students.find(1)
    db.students.remove(student)

    staged = [e.entity for e in db.entries() if e.state is EntityState.DELETED]
    assert sorted(e.id for e in staged if isinstance(e, Enrollment)) == [1, 2]

    assert db.save_changes() == 3
    assert other_db.students.find(1) is None
    assert other_db.enrollments.where(Enrollment.student_id == 1).count() == 0
    assert other_db.enrollments.count() == 3


def test_delete_course_cascades(db, other_db):
    db.courses.remove(db.courses.find(1))
    db.save_changes()
    assert other_db.enrollments.where(Enrollment.course_id == 1).count() == 0
    assert other_db.enrollments.count() == 3
    assert other_db.students.count() == 3


def test_delete_student_with_loaded_enrollments(db, other_db):
    student = db.students.include(Student.enrollments).where(Student.id == 2).single()
    assert len(student.enrollments) == 2

    db.students.remove(student)
    db.save_changes()
    assert other_db.enrollments.where(Enrollment.student_id == 2).count() == 0


def test_delete_student_drops_unsaved_enrollments(db, other_db):
    unsaved = Enrollment(student_id=3, course_id=1)
    db.enrollments.add(unsaved)
    db.students.remove(db.students.find(3))

    assert unsaved not in states(db)
    assert db.save_changes() == 2
    assert other_db.enrollments.where(Enrollment.student_id == 3).count() == 0
    assert other_db.enrollments.count() == 4


def test_delete_course_drops_enrollments_linked_by_relationship(db, other_db):
    course = db.courses.find(3)
    unsaved = Enrollment(student_id=3, course=course)
    db.enrollments.add(unsaved)
    db.courses.remove(course)

    assert unsaved not in states(db)
    assert db.save_changes() == 2
    assert other_db.courses.find(3) is None
    assert other_db.enrollments.count() == 4


def test_store_cascade_backstop(engine, other_db):
    # Delete outside the context: the foreign key rule alone removes dependents
    with engine.begin() as connection:
        connection.execute(Student.__table__.delete().where(Student.__table__.c.id == 3))
    assert other_db.enrollments.where(Enrollment.student_id == 3).count() == 0


def test_remove_range(db, other_db):
    ungraded = db.enrollments.where(Enrollment.grade.is_(None)).to_list()
    db.enrollments.remove_range(ungraded)
    assert db.save_changes() == 1
    assert other_db.enrollments.count() == 4


# =============================================================================
# Relationships
# =============================================================================

def test_navigation_never_loads_implicitly(db):
    student = db.students.find(2)
    with pytest.raises(InvalidRequestError):
        student.enrollments


def test_explicit_load(db):
    student = db.students.find(2)
    enrollments = db.load(student, "enrollments")
    assert sorted(e.course_id for e in enrollments) == [1, 3]
    assert student.enrollments is enrollments

    enrollment = db.enrollments.find(5)
    course = db.load(enrollment, "course")
    assert course.title == "Java Development"
    assert enrollment.course is course


def test_close_releases_tracked_entities(engine):
    db = SchoolContext(bind=engine)
    db.students.find(1)
    db.close()
    assert db.entries() == []
