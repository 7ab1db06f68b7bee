import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from session_booking.core.errors import BookingError
from session_booking.core.logging_middleware import LoggingMiddleware
from session_booking.db.init_db import init_db
from session_booking.routers.activity import router as activity_router
from session_booking.routers.admin import router as admin_router
from session_booking.routers.auth import router as auth_router
from session_booking.routers.bookings import router as bookings_router
from session_booking.routers.courses import router as courses_router
from session_booking.routers.enrollments import router as enrollments_router
from session_booking.routers.grades import router as grades_router
from session_booking.routers.instructor_dashboard import router as instructor_dashboard_router
from session_booking.routers.slots import router as slots_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Session Booking")

# Middleware
app.add_middleware(LoggingMiddleware)


# Missing metrics and bad weight settings fail the whole request
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(courses_router, prefix="/courses", tags=["courses"])
app.include_router(enrollments_router, prefix="/enrollments", tags=["enrollments"])
app.include_router(slots_router, tags=["slots"])
app.include_router(bookings_router, tags=["bookings"])
app.include_router(grades_router, tags=["grades"])
app.include_router(activity_router, tags=["activity"])

# Instructor dashboard (no prefix; route already defines full path)
app.include_router(instructor_dashboard_router)
