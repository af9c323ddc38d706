from __future__ import annotations

from fastapi import HTTPException


class InvalidConfig(ValueError):
    """Configuration has the wrong shape (e.g. ``zones`` is not a list)."""


def bad_request(code: str, message: str):
    raise HTTPException(status_code=400, detail={"code": code, "message": message})


def not_found(code: str, message: str):
    raise HTTPException(status_code=404, detail={"code": code, "message": message})
