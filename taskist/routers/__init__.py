from fastapi import APIRouter

from . import auth, tasks

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])


@api_router.get("/health", tags=["health"])
def health():
    return {"ok": True}
