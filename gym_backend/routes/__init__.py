"""
HTTP routes, aggregated into one router mounted under the API prefix.
"""

from fastapi import APIRouter

from gym_backend.routes import auth, devices, gyms, organizations

router = APIRouter()
router.include_router(auth.router)
router.include_router(organizations.router)
router.include_router(devices.router)
router.include_router(gyms.router)
