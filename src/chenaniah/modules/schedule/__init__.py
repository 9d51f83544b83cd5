"""
Schedule Module

Interview scheduling and outcomes:
1. Time slots, created singly or in bulk
2. Public booking for applicants with an approved submission
3. Status workflow (scheduled -> completed / no_show / cancelled)
4. Coordinator attendance and approval checks
5. Judge evaluations (0-5 per criterion) and final decisions

API Endpoints are listed in ``router``.
"""

from .router import router

__all__ = ["router"]
