"""API routes for targets, serial ports and preferences."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from mrbwriter.config.preferences import Preferences
from mrbwriter.models.target import Target, profile_for
from mrbwriter.transport.uart import SerialTransport

router = APIRouter(tags=["device"])


class TargetInfo(BaseModel):
    name: Target
    baud_rate: int


class PortEntry(BaseModel):
    device: str
    description: str = ""
    authorized: bool = False


class PreferencesView(BaseModel):
    target: Target
    auto_connect: bool = Field(alias="autoConnect")

    model_config = {"populate_by_name": True}


class PreferencesUpdate(BaseModel):
    target: Target | None = None
    auto_connect: bool | None = Field(default=None, alias="autoConnect")

    model_config = {"populate_by_name": True}


def _preferences(request: Request) -> Preferences:
    return request.app.state.preferences


@router.get("/targets")
async def list_targets() -> list[TargetInfo]:
    """List supported boards and their serial settings."""
    return [TargetInfo(name=t, baud_rate=profile_for(t).baud_rate) for t in Target]


@router.get("/ports")
async def list_ports(request: Request) -> list[PortEntry]:
    """List serial ports present on this machine."""
    prefs = _preferences(request)
    transport = SerialTransport(prefs.target, preferences=prefs)
    try:
        ports = await transport.list_ports()
    except OSError as exc:
        raise HTTPException(status_code=502, detail=f"Port scan failed: {exc}") from exc
    authorized = set(prefs.authorized_ports)
    return [
        PortEntry(device=p.device, description=p.description, authorized=p.device in authorized)
        for p in ports
    ]


@router.get("/preferences")
async def get_preferences(request: Request) -> PreferencesView:
    prefs = _preferences(request)
    return PreferencesView(target=prefs.target, auto_connect=prefs.auto_connect)


@router.put("/preferences")
async def update_preferences(request: Request, update: PreferencesUpdate) -> PreferencesView:
    prefs = _preferences(request)
    if update.target is not None:
        prefs.target = update.target
    if update.auto_connect is not None:
        prefs.auto_connect = update.auto_connect
    return PreferencesView(target=prefs.target, auto_connect=prefs.auto_connect)
