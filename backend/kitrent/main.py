import logging

from fastapi import FastAPI
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .database import SessionLocal
from .redis_client import redis_client
from .routers import availability, bookings

logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Kit Rental Booking API")

app.include_router(availability.router)
app.include_router(bookings.router)


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except RedisError:
        redis_ok = False

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    finally:
        db.close()

    return {"redis": redis_ok, "database": db_ok}
