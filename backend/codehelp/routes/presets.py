"""Preset code CRUD: snippets the editor loads by query."""

from __future__ import annotations

from fastapi import APIRouter

from codehelp import preset_store
from codehelp.errors import CodeHelpError, PresetNotFoundError
from codehelp.models import PresetCodeInput

router = APIRouter()


@router.get("/")
async def list_presets() -> dict:
    presets = await preset_store.list_presets()
    return {"data": [p.model_dump() for p in presets]}


@router.get("/query/{query}")
async def get_preset(query: str) -> dict:
    preset = await preset_store.get_preset_by_query(query)
    if preset is None or not preset.code:
        raise PresetNotFoundError("Record not found!")
    return {"data": preset.model_dump()}


@router.post("/")
async def create_preset(body: PresetCodeInput) -> dict:
    preset = await preset_store.create_preset(body.query, body.code)
    return {"data": preset.model_dump()}


@router.delete("/{preset_id}")
async def delete_preset(preset_id: int) -> dict:
    if not await preset_store.delete_preset(preset_id):
        raise CodeHelpError("Record not found!")
    return {"data": True}
