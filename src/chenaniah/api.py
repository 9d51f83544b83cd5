from fastapi import APIRouter

from chenaniah.modules.applicants import router as applicants_router
from chenaniah.modules.auth import router as auth_router
from chenaniah.modules.schedule import router as schedule_router
from chenaniah.modules.submissions import router as submissions_router
from chenaniah.modules.submissions import stats_router as submission_stats_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(applicants_router, prefix="/applicant", tags=["Applicants"])

api_router.include_router(submissions_router, prefix="/submissions", tags=["Submissions"])

api_router.include_router(submission_stats_router, prefix="/stats", tags=["Submissions"])

api_router.include_router(schedule_router, prefix="/schedule", tags=["Schedule"])
