"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (attendance, auth, employees, leaves,
                                  notifications, performance, system, tasks)

api_router = APIRouter()

# Auth (login, refresh, logout, me)
api_router.include_router(auth.router)

# Employee registry
api_router.include_router(employees.router)

# Attendance state machine + admin corrections
api_router.include_router(attendance.router)

# Monthly details and stored performance records
api_router.include_router(performance.router)

# Leave requests and tasks feed the monthly scores
api_router.include_router(leaves.router)
api_router.include_router(tasks.router)

# Inbox + realtime socket
api_router.include_router(notifications.router)

# Health, status
api_router.include_router(system.router)
