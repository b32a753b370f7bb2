import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, field_validator

from dotenv_editor.services.env_file import EnvStore, normalize_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

Value = str | bool | int | float | None

_LINE_BREAKS = ("\n", "\r")


def _key_error(key: str) -> str | None:
    """Return an error message if key cannot be written as one KEY= line, else None."""
    if not key.strip():
        return "Key is required."
    if "=" in key or any(c in key for c in _LINE_BREAKS):
        return "Key must not contain '=' or line breaks."
    return None


def _value_error(value: Value) -> str | None:
    if isinstance(value, str) and any(c in value for c in _LINE_BREAKS):
        return "Multi-line values are not supported."
    return None


class ValueBody(BaseModel):
    value: Value = None

    @field_validator("value")
    @classmethod
    def single_line(cls, v):
        error = _value_error(v)
        if error:
            raise ValueError(error)
        return v


class ValuesBody(BaseModel):
    values: dict[str, Value]

    @field_validator("values")
    @classmethod
    def single_lines(cls, v):
        for key, value in v.items():
            error = _key_error(key) or _value_error(value)
            if error:
                raise ValueError(f"{key!r}: {error}")
        return v


def get_store(request: Request) -> EnvStore:
    store = getattr(request.app.state, "env_store", None)
    if store is None:
        raise HTTPException(status_code=404, detail="No .env file loaded.")
    return store


def _check_key(key: str) -> None:
    error = _key_error(key)
    if error:
        raise HTTPException(status_code=422, detail=error)


# Handlers are async: the shared store is only touched from the event loop

@router.get("/ping")
async def ping():
    return {"status": "ok"}


@router.get("/env")
async def list_env(
    key: list[str] | None = Query(None),
    store: EnvStore = Depends(get_store),
) -> dict[str, Any]:
    if key:
        return store.only(key)
    return store.all()


@router.get("/env/{key}")
async def read_env(key: str, store: EnvStore = Depends(get_store)):
    if key not in store:
        raise HTTPException(status_code=404, detail=f"{normalize_key(key)} is not set.")
    return {"key": normalize_key(key), "value": store.get(key)}


@router.put("/env")
async def stage_many(body: ValuesBody, store: EnvStore = Depends(get_store)):
    store.set(body.values)
    return {"staged": store.staged}


@router.put("/env/{key}")
async def stage_one(key: str, body: ValueBody, store: EnvStore = Depends(get_store)):
    _check_key(key)
    store.set(key, body.value)
    return {"key": normalize_key(key), "value": store.get(key)}


@router.delete("/env/{key}")
async def remove_env(key: str, store: EnvStore = Depends(get_store)):
    if key not in store:
        raise HTTPException(status_code=404, detail=f"{normalize_key(key)} is not set.")
    store.remove(key)
    return {"removed": normalize_key(key)}


@router.get("/preview", response_class=PlainTextResponse)
async def preview(store: EnvStore = Depends(get_store)):
    return store.render()


@router.post("/write")
async def write(store: EnvStore = Depends(get_store)):
    if not store.write():
        raise HTTPException(status_code=500, detail=f"Could not write {store.path}.")
    return {"written": True}


@router.get("/backups")
async def backups(store: EnvStore = Depends(get_store)):
    return {
        "directory": str(store.backup_dir),
        "backups": [record.as_dict() for record in store.backups()],
    }


@router.post("/backups/prune")
async def prune(store: EnvStore = Depends(get_store)):
    removed = store.clear_old_backups()
    return {"removed": [path.name for path in removed]}
