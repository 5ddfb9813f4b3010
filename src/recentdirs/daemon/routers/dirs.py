"""Directory history endpoints: query, push, list."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...engine import RecentDirServer
from ...errors import EngineStoppedError, ValidationError
from ..deps import get_engine
from ..models import PushRequest, QueryRequest

log = logging.getLogger("recentdirs.daemon.dirs")
router = APIRouter()


@router.post("/query")
async def query_dirs(req: QueryRequest, engine: RecentDirServer = Depends(get_engine)):
    try:
        matches = await engine.query(req.query)
    except EngineStoppedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"query": req.query, "matches": [m.to_dict() for m in matches]}


@router.post("/push")
async def push_dir(req: PushRequest, engine: RecentDirServer = Depends(get_engine)):
    try:
        await engine.push(req.path)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    log.debug("Pushed %s", req.path)
    return {"status": "ok", "path": req.path}


@router.get("/list")
async def list_dirs(engine: RecentDirServer = Depends(get_engine)):
    try:
        dirs = await engine.list_dirs()
    except EngineStoppedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"dirs": dirs}
