# rollcall/dependencies.py
from fastapi import Request

from rollcall.realtime.hub import ConnectionHub
from rollcall.services.store import AttendanceStore


def get_store(request: Request) -> AttendanceStore:
    return request.app.state.store


def get_hub(request: Request) -> ConnectionHub:
    return request.app.state.hub
