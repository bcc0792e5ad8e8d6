from fastapi import APIRouter

from oceanview.api.v1.routes.auth import router as auth_router
from oceanview.api.v1.routes.profile import router as profile_router
from oceanview.api.v1.routes.catalog import router as catalog_router
from oceanview.api.v1.routes.bookings import router as bookings_router
from oceanview.api.v1.routes.payments import router as payments_router
from oceanview.api.v1.routes.testimonials import router as testimonials_router
from oceanview.api.v1.routes.enquiries import router as enquiries_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(catalog_router)
api_router.include_router(bookings_router)
api_router.include_router(payments_router)
api_router.include_router(testimonials_router)
api_router.include_router(enquiries_router)
