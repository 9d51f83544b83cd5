"""
Applicants Module

Resolves an applicant's position in the pipeline from a phone number:
submission review -> interview -> final decision.

API Endpoints:
- POST /applicant/status - Applicant status view
"""

from .router import router

__all__ = ["router"]
