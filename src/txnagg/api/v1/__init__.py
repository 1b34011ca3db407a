"""API version 1 routes."""

from fastapi import APIRouter

from txnagg.api.v1 import transactions

router = APIRouter(prefix="/api/v1")

router.include_router(transactions.router)
