"""Repo-root Uvicorn entrypoint.

Allows running the service from the repo root:

    uvicorn app.main:app --reload

This simply re-exports the FastAPI app defined in `backend/interview_scheduler/main.py`.
"""

from backend.interview_scheduler.main import app  # re-export
