"""
bracket_engine/routes/__init__.py
Route registration
"""
from fastapi import APIRouter

from bracket_engine.routes import bracket_admin, bracket_live, bracket_workers

router = APIRouter()

router.include_router(bracket_live.router)
router.include_router(bracket_admin.router)
router.include_router(bracket_workers.router)
