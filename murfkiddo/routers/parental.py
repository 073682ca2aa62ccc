"""GET/POST /api/parental-settings."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from murfkiddo import store as parental
from murfkiddo.config import settings
from murfkiddo.dependencies import get_settings_store
from murfkiddo.errors import ValidationError
from murfkiddo.schemas import ParentalRequest
from murfkiddo.store import SettingsStore

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/parental-settings")
async def read_parental_data(
    section: str = Query(default="", alias="type"),
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    """Return one section (``?type=settings|usage|activity``) or all of them."""
    if section == "settings":
        return {"success": True, "settings": store.read_settings()}
    if section == "usage":
        return {"success": True, "usage": store.read_usage()}
    if section == "activity":
        return {"success": True, "activity": store.read_activity()}
    return {"success": True, **store.snapshot()}


@router.post("/parental-settings")
async def update_parental_data(
    req: ParentalRequest,
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    cap = settings.activity_history_cap

    if req.action == "updateSettings":
        updated = parental.update_settings(store, req.settings)
        return {
            "success": True,
            "message": "Settings updated successfully",
            "settings": updated,
        }

    if req.action == "addActivity":
        if not req.activityUpdate:
            raise ValidationError("activityUpdate is required")
        usage = parental.add_activity(store, req.activityUpdate, cap)
        log.info("Logged %s activity", req.activityUpdate.get("mode", "unknown"))
        return {
            "success": True,
            "message": "Activity logged successfully",
            "usage": usage,
        }

    if req.action == "resetData":
        usage = parental.reset_data(store)
        return {
            "success": True,
            "message": "Usage data reset successfully",
            "usage": usage,
        }

    if req.action == "simulateUsage":
        usage, activity = parental.simulate_usage(store, cap)
        return {
            "success": True,
            "message": "Demo usage data generated",
            "usage": usage,
            "activity": activity,
        }

    raise ValidationError("Invalid action")
