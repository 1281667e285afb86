from fastapi import APIRouter
from app.api.v1.endpoints import (
    admin,
    auth,
    bookings,
    customers,
    dashboard,
    notifications,
    payments,
    properties,
    quotes,
    referrals,
    reviews,
    services,
    weather,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(properties.router, prefix="/properties", tags=["properties"])
api_router.include_router(services.router, prefix="/services", tags=["services"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(referrals.router, prefix="/referrals", tags=["referrals"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(weather.router, prefix="/weather", tags=["weather"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
