"""
Submissions Module

Applicant audition submissions and their review.

API Endpoints:
- POST /submissions - Submit an application
- GET /submissions - List submissions (staff)
- GET /submissions/{id} - Submission detail (staff)
- PUT /submissions/{id}/status - Review decision (staff)
- GET /stats - Review statistics (staff)
"""

from .router import router, stats_router

__all__ = ["router", "stats_router"]
