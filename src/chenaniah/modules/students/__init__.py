"""
Students Module

Student accounts created from accepted interviews. Endpoints live in the
auth module under /auth/student.
"""

from .models import Student
from .repository import StudentRepository

__all__ = ["Student", "StudentRepository"]
