"""
Per-resource controllers driving the admin screens.

A controller owns a CollectionStore, validates input with the same
rules the API applies, sends the mutation and then reloads the whole
collection. Failures are logged and handed to ``on_error`` (the alert
dialog of the screens); the mutating call then returns None.
"""
import logging

from client.api import ApiError
from client.store import ASC, DATE, DESC, NUMBER, PAGE_SIZE, STRING, CollectionStore
from utils.validation import (
    normalize_assignment, normalize_class, normalize_student, normalize_subject,
    normalize_teacher, validate_assignment, validate_class, validate_student,
    validate_subject, validate_teacher,
)

logger = logging.getLogger(__name__)


class ResourceController:
    """Load / create / update / delete for one /api resource"""

    resource = None
    collection_key = None
    item_key = None
    id_field = None
    label = None

    def __init__(self, api, on_error=None, page_size=PAGE_SIZE):
        self.api = api
        self.store = CollectionStore(page_size)
        self.on_error = on_error

    # ============ HOOKS ============
    def normalize(self, data):
        return dict(data)

    def validate(self, form, creating=True):
        return []

    def collection_path(self):
        return self.resource

    # ============ HELPERS ============
    def report(self, action, error):
        message = f'Failed to {action}: {error}'
        logger.error(message)
        if self.on_error:
            self.on_error(message)

    def prepare(self, data, action, creating=True):
        form = self.normalize(data)
        errors = self.validate(form, creating)
        if errors:
            self.report(action, ', '.join(errors))
            return None
        return form

    def find(self, item_id):
        return self.store.find(self.id_field, item_id)

    def view(self):
        return self.store.view()

    # ============ OPERATIONS ============
    def load(self):
        try:
            body = self.api.get(self.collection_path())
        except ApiError as e:
            self.report(f'load {self.collection_key}', e)
            return None

        self.store.load(body.get(self.collection_key, []))
        return self.store.view()

    def create(self, data):
        action = f'add {self.label}'
        form = self.prepare(data, action)
        if form is None:
            return None

        try:
            body = self.api.post(self.resource, form)
        except ApiError as e:
            self.report(action, e)
            return None

        self.load()
        return body.get(self.item_key)

    def update(self, item_id, data):
        action = f'update {self.label}'
        form = self.prepare(data, action, creating=False)
        if form is None:
            return None

        try:
            body = self.api.put(f'{self.resource}/{item_id}', form)
        except ApiError as e:
            self.report(action, e)
            return None

        self.load()
        return body.get(self.item_key)

    def delete(self, item_id):
        try:
            self.api.delete(f'{self.resource}/{item_id}')
        except ApiError as e:
            self.report(f'delete {self.label}', e)
            return False

        self.load()
        return True


# ============ CLASSES ============
class ClassesController(ResourceController):
    resource = 'classes'
    collection_key = 'classes'
    item_key = 'class'
    id_field = 'class_id'
    label = 'class'

    def normalize(self, data):
        return normalize_class(data)

    def validate(self, form, creating=True):
        return validate_class(form)

    def stats(self):
        classes = self.store.items
        return {
            'total_classes': len(classes),
            'total_students': sum(c.get('student_count') or 0 for c in classes),
            'total_teachers': sum(c.get('teacher_count') or 0 for c in classes),
            'total_subjects': sum(c.get('subject_count') or 0 for c in classes),
        }


# ============ STUDENTS ============
STUDENT_SORTS = {
    'name': ('name', ASC, STRING),
    'name_desc': ('name', DESC, STRING),
    'roll': ('roll_number', ASC, STRING),
    'age': ('age', ASC, NUMBER),
    'age_desc': ('age', DESC, NUMBER),
    'class': ('class_number', ASC, NUMBER),
}
STUDENT_DEFAULT_SORT = ('student_id', ASC, NUMBER)

STUDENT_AGE_BANDS = {
    '5-9': (5, 9),
    '10-12': (10, 12),
    '13-15': (13, 15),
    '16-18': (16, 18),
    '19+': (19, None),
}

STUDENT_SEARCH_FIELDS = ('name', 'roll_number', 'fname')
STUDENT_NUMERIC_FIELDS = ('student_id', 'age', 'class_number')


def in_band(age, low, high):
    return age >= low and (high is None or age <= high)


class StudentsController(ResourceController):
    resource = 'students'
    collection_key = 'students'
    item_key = 'student'
    id_field = 'student_id'
    label = 'student'

    def __init__(self, api, on_error=None, page_size=PAGE_SIZE):
        super().__init__(api, on_error, page_size)
        self.sort('name')

    def normalize(self, data):
        return normalize_student(data)

    def validate(self, form, creating=True):
        return validate_student(form)

    def load_class(self, class_number):
        """Replace the collection with one class, ordered by roll number"""
        try:
            body = self.api.get(f'{self.resource}/class/{class_number}')
        except ApiError as e:
            self.report('load students', e)
            return None

        self.store.load(body.get('students', []))
        return self.store.view()

    # ============ FILTERS ============
    def filter_by_class(self, class_number):
        if not class_number:
            self.store.set_filter('class', None)
            return self.view()

        class_number = int(class_number)
        self.store.set_filter('class', lambda s: s.get('class_number') == class_number)
        return self.view()

    def filter_by_gender(self, gender):
        predicate = (lambda s: s.get('gender') == gender) if gender else None
        self.store.set_filter('gender', predicate)
        return self.view()

    def filter_by_age_band(self, band):
        """Students without a recorded age are kept by every band"""
        if not band:
            self.store.set_filter('age', None)
            return self.view()

        if band not in STUDENT_AGE_BANDS:
            raise ValueError(f'Unknown age band: {band}')

        low, high = STUDENT_AGE_BANDS[band]
        self.store.set_filter(
            'age', lambda s: not s.get('age') or in_band(s['age'], low, high)
        )
        return self.view()

    def search(self, text):
        self.store.set_search(text, STUDENT_SEARCH_FIELDS)
        return self.view()

    def sort(self, option):
        self.store.sort_by(*STUDENT_SORTS.get(option, STUDENT_DEFAULT_SORT))
        return self.view()

    def toggle_sort(self, field):
        kind = NUMBER if field in STUDENT_NUMERIC_FIELDS else STRING
        self.store.toggle_sort(field, kind)
        return self.view()

    def reset_filters(self):
        self.store.clear_filters()
        return self.sort('name')

    def stats(self):
        """Figures over the filtered students, like the summary cards"""
        students = self.store.filtered()
        total = len(students)
        total_age = sum(s.get('age') or 0 for s in students)

        return {
            'total_students': total,
            'male_students': sum(1 for s in students if s.get('gender') == 'Male'),
            'female_students': sum(1 for s in students if s.get('gender') == 'Female'),
            'average_age': round(total_age / total, 1) if total else 0.0,
        }


# ============ TEACHERS ============
TEACHER_OPEN_AGE_RANGE = '51+'
TEACHER_NUMERIC_FIELDS = ('teacher_id', 'age')


def parse_age_range(age_range):
    """'a-b' -> (a, b); '51+' -> (51, None)"""
    if age_range.endswith('+'):
        return int(age_range[:-1]), None

    low, _, high = age_range.partition('-')
    try:
        return int(low), int(high)
    except ValueError:
        raise ValueError(f'Unknown age range: {age_range}')


class TeachersController(ResourceController):
    resource = 'teachers'
    collection_key = 'teachers'
    item_key = 'teacher'
    id_field = 'teacher_id'
    label = 'teacher'

    def __init__(self, api, on_error=None, page_size=PAGE_SIZE):
        super().__init__(api, on_error, page_size)
        self.store.sort_by('name', ASC, STRING)

    def normalize(self, data):
        form = normalize_teacher(data)
        if hasattr(form['hire_date'], 'isoformat'):
            form['hire_date'] = form['hire_date'].isoformat()
        return form

    def validate(self, form, creating=True):
        return validate_teacher(form)

    # ============ FILTERS ============
    def search(self, text):
        self.store.set_search(text, ('name',))
        return self.view()

    def filter_by_qualification(self, qualification):
        predicate = (lambda t: t.get('qualification') == qualification) if qualification else None
        self.store.set_filter('qualification', predicate)
        return self.view()

    def filter_by_gender(self, gender):
        predicate = (lambda t: t.get('gender') == gender) if gender else None
        self.store.set_filter('gender', predicate)
        return self.view()

    def filter_by_age_range(self, age_range):
        """Teachers without a recorded age never match a range"""
        if not age_range:
            self.store.set_filter('age', None)
            return self.view()

        low, high = parse_age_range(age_range)
        self.store.set_filter('age', lambda t: bool(t.get('age')) and in_band(t['age'], low, high))
        return self.view()

    def sort(self, field, direction=ASC):
        self.store.sort_by(field, direction, self.sort_kind(field))
        return self.view()

    def toggle_sort(self, field):
        self.store.toggle_sort(field, self.sort_kind(field))
        return self.view()

    @staticmethod
    def sort_kind(field):
        if field == 'hire_date':
            return DATE
        if field in TEACHER_NUMERIC_FIELDS:
            return NUMBER
        return STRING

    def reset_filters(self):
        self.store.clear_filters()
        return self.sort('name')

    def stats(self, assignments=()):
        teachers = self.store.items
        return {
            'total_teachers': len(teachers),
            'male_teachers': sum(1 for t in teachers if t.get('gender') == 'Male'),
            'female_teachers': sum(1 for t in teachers if t.get('gender') == 'Female'),
            'assigned_teachers': len({a.get('teacher_id') for a in assignments}),
        }


# ============ TEACHER ASSIGNMENTS ============
class AssignmentsController(ResourceController):
    resource = 'teacher-assignments'
    collection_key = 'assignments'
    item_key = 'assignment'
    id_field = 'assignment_id'
    label = 'assignment'

    def normalize(self, data):
        return normalize_assignment(data)

    def validate(self, form, creating=True):
        return validate_assignment(form)

    def is_assigned(self, teacher_id):
        return self.store.find('teacher_id', teacher_id) is not None

    def assign_subjects(self, teacher_id, class_number, subject_ids):
        """
        Assign one teacher to several subjects of a class, skipping
        subjects already assigned. Returns how many were created.
        """
        action = 'assign teacher'

        if not teacher_id or not class_number:
            self.report(action, 'Please select both class and teacher.')
            return None

        if not subject_ids:
            self.report(action, 'Please select at least one subject to assign.')
            return None

        teacher_id, class_number = int(teacher_id), int(class_number)
        existing = {
            a.get('subject_id') for a in self.store.items
            if a.get('teacher_id') == teacher_id and a.get('class_number') == class_number
        }
        new_subjects = [int(s) for s in subject_ids if int(s) not in existing]

        if not new_subjects:
            self.report(action, 'Teacher is already assigned to all selected subjects for this class.')
            return None

        created = 0
        try:
            for subject_id in new_subjects:
                self.api.post(self.resource, {
                    'teacher_id': teacher_id,
                    'class_number': class_number,
                    'subject_id': subject_id
                })
                created += 1
        except ApiError as e:
            self.report(action, e)
            if created:
                self.load()
            return None

        self.load()
        return created

    # ============ FILTERS ============
    def filter_by_teacher(self, teacher_id):
        return self.filter_on('teacher_id', teacher_id)

    def filter_by_class(self, class_number):
        return self.filter_on('class_number', class_number)

    def filter_by_subject(self, subject_id):
        return self.filter_on('subject_id', subject_id)

    def filter_on(self, field, value):
        if not value:
            self.store.set_filter(field, None)
            return self.view()

        value = int(value)
        self.store.set_filter(field, lambda a: a.get(field) == value)
        return self.view()

    def search(self, text):
        self.store.set_search(text, ('teacher_name',))
        return self.view()

    def reset_filters(self):
        self.store.clear_filters()
        return self.view()

    def stats(self):
        assignments = self.store.items
        return {
            'total_assignments': len(assignments),
            'assigned_teachers': len({a.get('teacher_id') for a in assignments}),
            'classes_covered': len({a.get('class_number') for a in assignments}),
            'subjects_covered': len({a.get('subject_id') for a in assignments}),
        }


# ============ SUBJECTS ============
class SubjectsController(ResourceController):
    """Subjects of the selected class; all subjects when no class is selected"""

    resource = 'subjects'
    collection_key = 'subjects'
    item_key = 'subject'
    id_field = 'subject_id'
    label = 'subject'

    def __init__(self, api, on_error=None, page_size=PAGE_SIZE):
        super().__init__(api, on_error, page_size)
        self.class_number = None

    def normalize(self, data):
        form = normalize_subject(data)
        if form['class_number'] is None:
            form['class_number'] = self.class_number
        return form

    def validate(self, form, creating=True):
        return validate_subject(form, require_class=creating)

    def collection_path(self):
        if self.class_number is None:
            return self.resource
        return f'{self.resource}/class/{self.class_number}'

    def select_class(self, class_number):
        self.class_number = int(class_number) if class_number else None
        self.store.clear_filters()
        return self.load()

    def search(self, text):
        self.store.set_search(text, ('subject_name', 'class_name'))
        return self.view()

    def toggle_sort(self, field):
        kind = NUMBER if field in ('subject_id', 'class_number', 'max_marks', 'student_count') else STRING
        self.store.toggle_sort(field, kind)
        return self.view()

    def stats(self):
        subjects = self.store.items
        total = len(subjects)
        total_marks = sum(s.get('max_marks') or 0 for s in subjects)

        return {
            'total_subjects': total,
            'total_max_marks': total_marks,
            'average_max_marks': round(total_marks / total, 1) if total else 0.0,
        }
