# client/__init__.py
from .api import ApiClient, ApiError
from .store import CollectionStore, Page
from .controllers import (
    AssignmentsController, ClassesController, StudentsController,
    SubjectsController, TeachersController,
)

__all__ = [
    'ApiClient', 'ApiError', 'CollectionStore', 'Page',
    'AssignmentsController', 'ClassesController', 'StudentsController',
    'SubjectsController', 'TeachersController',
]
