"""
Validation rules shared by the API routes and the client controllers.

Every validate_* function takes the normalized form data (see the
normalize_* helpers) and returns a list of human-readable messages.
An empty list means the data is valid. Routes join the messages with
', ' into the 400 error body; client controllers refuse to send the
request and report the same text.
"""
import re
from datetime import date, datetime

GENDERS = ['Male', 'Female', 'Other']

STUDENT_MIN_AGE = 5
STUDENT_MAX_AGE = 25

ROLL_NUMBER_MAX_LENGTH = 20
NAME_MAX_LENGTH = 100
ADDRESS_MAX_LENGTH = 500
PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15
DEFAULT_MAX_MARKS = 100

# Largest value a 32-bit INTEGER column holds
MAX_INT = 2**31 - 1

ALPHANUMERIC_RE = re.compile(r'^[A-Za-z0-9]+$')
LETTERS_AND_SPACES_RE = re.compile(r'^[A-Za-z\s]+$')
LETTERS_DIGITS_SPACES_RE = re.compile(r'^[A-Za-z0-9\s]+$')
ONLY_DIGITS_RE = re.compile(r'^\d+$')
PHONE_SEPARATORS_RE = re.compile(r'[\s\-\(\)]')
EMAIL_RE = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


# ============ FIELD ACCESS ============
def pick(data, *keys, default=None):
    """Return the first present key; accepts snake_case and camelCase names"""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def clean_string(value):
    return str(value).strip() if value is not None else ''


def clean_string_or_none(value):
    cleaned = clean_string(value)
    return cleaned if cleaned else None


def to_int_or_raw(value):
    """
    Convert digit strings to int; leave anything else untouched so the
    validators can report it instead of silently dropping it.
    """
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    text = str(value).strip()
    if ONLY_DIGITS_RE.match(text):
        return int(text)
    return text


def is_positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_INT


def is_only_digits(value):
    return bool(ONLY_DIGITS_RE.match(str(value)))


def strip_phone(phone):
    return PHONE_SEPARATORS_RE.sub('', phone)


def parse_date(value):
    """Parse an ISO date (YYYY-MM-DD); raises ValueError on bad input"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip()[:10], '%Y-%m-%d').date()


# ============ SHARED FIELD RULES ============
def check_person_name(value, label):
    """Letters and spaces only, 1-100 chars, not only digits"""
    if not value:
        return [f'{label} is required']
    if len(value) > NAME_MAX_LENGTH:
        return [f'{label} must be {NAME_MAX_LENGTH} characters or less']
    if is_only_digits(value):
        return [f'{label} cannot be only numbers']
    if not LETTERS_AND_SPACES_RE.match(value):
        return [f'{label} can only contain letters and spaces']
    return []


def check_label_name(value, label):
    """Class and subject names: letters, digits and spaces, not only digits"""
    if not value:
        return [f'{label} is required']
    if not LETTERS_DIGITS_SPACES_RE.match(value):
        return [f'{label} can only contain letters, numbers and spaces']
    if is_only_digits(value.replace(' ', '')):
        return [f'{label} cannot be only numbers']
    return []


def check_gender(value):
    if value and value not in GENDERS:
        return ['Gender must be Male, Female, or Other']
    return []


def check_address(value):
    errors = []
    if value:
        if is_only_digits(re.sub(r'\s', '', value)):
            errors.append('Address cannot be only numbers')
        if len(value) > ADDRESS_MAX_LENGTH:
            errors.append(f'Address must be {ADDRESS_MAX_LENGTH} characters or less')
    return errors


def check_phone(value):
    if not value:
        return []
    digits = strip_phone(value)
    if not is_only_digits(digits):
        return ['Phone number can only contain digits, spaces, hyphens, and parentheses']
    if len(digits) > PHONE_MAX_DIGITS:
        return [f'Phone number must be {PHONE_MAX_DIGITS} digits or less']
    if len(digits) < PHONE_MIN_DIGITS:
        return [f'Phone number must be at least {PHONE_MIN_DIGITS} digits']
    return []


# ============ CLASSES ============
def normalize_class(data):
    return {
        'class_name': clean_string(pick(data, 'class_name', 'className')),
        'class_number': to_int_or_raw(pick(data, 'class_number', 'classNumber')),
    }


def validate_class(form):
    errors = check_label_name(form['class_name'], 'Class name')

    class_number = form['class_number']
    if class_number is None:
        errors.append('Class number is required')
    elif not is_positive_int(class_number):
        errors.append('Class number can only be a positive number')

    return errors


# ============ STUDENTS ============
def normalize_student(data):
    return {
        'roll_number': clean_string(pick(data, 'roll_number', 'rollNumber')),
        'name': clean_string(pick(data, 'name')),
        'fname': clean_string(pick(data, 'fname', 'father_name', 'fatherName')),
        'age': to_int_or_raw(pick(data, 'age')),
        'class_number': to_int_or_raw(pick(data, 'class_number', 'classNumber')),
        'gender': pick(data, 'gender') or None,
        'address': clean_string_or_none(pick(data, 'address')),
        'phone': clean_string_or_none(pick(data, 'phone')),
    }


def validate_student(form):
    errors = []

    roll_number = form['roll_number']
    if not roll_number:
        errors.append('Roll number is required')
    elif len(roll_number) > ROLL_NUMBER_MAX_LENGTH:
        errors.append(f'Roll number must be {ROLL_NUMBER_MAX_LENGTH} characters or less')
    elif not ALPHANUMERIC_RE.match(roll_number):
        errors.append('Roll number can only contain letters and numbers, no special characters')

    errors.extend(check_person_name(form['name'], 'Student name'))
    errors.extend(check_person_name(form['fname'], 'Father name'))

    if form['class_number'] is None:
        errors.append('Class is required')
    elif not is_positive_int(form['class_number']):
        errors.append('Class number can only be a positive number')

    age = form['age']
    if age is not None:
        if not isinstance(age, int) or isinstance(age, bool):
            errors.append('Age must be a positive number')
        elif age < STUDENT_MIN_AGE or age > STUDENT_MAX_AGE:
            errors.append(f'Age must be between {STUDENT_MIN_AGE} and {STUDENT_MAX_AGE}')

    errors.extend(check_gender(form['gender']))
    errors.extend(check_address(form['address']))
    errors.extend(check_phone(form['phone']))

    return errors


# ============ TEACHERS ============
def normalize_teacher(data):
    return {
        'name': clean_string(pick(data, 'name')),
        'email': clean_string_or_none(pick(data, 'email')),
        'phone': clean_string_or_none(pick(data, 'phone')),
        'qualification': clean_string_or_none(pick(data, 'qualification')),
        'age': to_int_or_raw(pick(data, 'age')),
        'gender': pick(data, 'gender') or None,
        'hire_date': pick(data, 'hire_date', 'hireDate') or None,
    }


def validate_teacher(form):
    errors = check_person_name(form['name'], 'Teacher name')

    if form['email'] and not EMAIL_RE.match(form['email']):
        errors.append('Invalid email format')

    errors.extend(check_phone(form['phone']))

    age = form['age']
    if age is not None and (not isinstance(age, int) or isinstance(age, bool) or not 0 <= age <= MAX_INT):
        errors.append('Age must be a positive number')

    errors.extend(check_gender(form['gender']))

    if form['hire_date']:
        try:
            parse_date(form['hire_date'])
        except ValueError:
            errors.append('Hire date must be a valid date (YYYY-MM-DD)')

    return errors


# ============ SUBJECTS ============
def normalize_subject(data):
    return {
        'subject_name': clean_string(pick(data, 'subject_name', 'subjectName')),
        'class_number': to_int_or_raw(pick(data, 'class_number', 'classNumber')),
        'max_marks': to_int_or_raw(pick(data, 'max_marks', 'maxMarks')),
    }


def validate_subject(form, require_class=True):
    errors = check_label_name(form['subject_name'], 'Subject name')

    if require_class:
        if form['class_number'] is None:
            errors.append('Class number is required')
        elif not is_positive_int(form['class_number']):
            errors.append('Class number can only be a positive number')

    max_marks = form['max_marks']
    if max_marks is not None and not is_positive_int(max_marks):
        errors.append('Maximum marks must be a positive whole number')

    return errors


# ============ TEACHER ASSIGNMENTS ============
def normalize_assignment(data):
    return {
        'teacher_id': to_int_or_raw(pick(data, 'teacher_id', 'teacherId')),
        'class_number': to_int_or_raw(pick(data, 'class_number', 'classNumber')),
        'subject_id': to_int_or_raw(pick(data, 'subject_id', 'subjectId')),
    }


def validate_assignment(form):
    if any(form[key] is None for key in ('teacher_id', 'class_number', 'subject_id')):
        return ['Teacher ID, class number, and subject ID are required']

    errors = []
    labels = {
        'teacher_id': 'Teacher ID',
        'class_number': 'Class number',
        'subject_id': 'Subject ID',
    }
    for key, label in labels.items():
        if not is_positive_int(form[key]):
            errors.append(f'{label} must be a positive number')
    return errors
