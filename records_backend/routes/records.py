from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..domain.errors import NotFoundError, StorageError
from ..domain.records import PostRecordInput, Record, UpdateRecordInput
from ..logs import LogContext
from ..repository.base import RecordRepository

router = APIRouter()

DELETED_MESSAGE = "record successfully deleted"


def get_repository(request: Request) -> RecordRepository:
    return request.app.state.repository


def _not_found(e: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": str(e)})


def _storage_error(e: StorageError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(e)})


@router.get("", response_model=list[Record])
def get_records(repo: RecordRepository = Depends(get_repository)):
    try:
        return repo.read()
    except StorageError as e:
        return _storage_error(e)


@router.post("", status_code=201, response_model=Record)
def post_record(body: PostRecordInput, repo: RecordRepository = Depends(get_repository)):
    log = LogContext("CREATE_RECORD")
    log.set_payload(body.dict())
    try:
        rec = repo.create(body)
    except StorageError as e:
        log.write("ERROR", str(e))
        return _storage_error(e)
    log.set_entity("record", rec.id)
    log.set_after(rec.dict())
    log.write("OK")
    return rec


@router.get("/{record_id}", response_model=Record)
def get_record_by_id(record_id: str, repo: RecordRepository = Depends(get_repository)):
    try:
        return repo.read_one(record_id)
    except NotFoundError as e:
        return _not_found(e)
    except StorageError as e:
        return _storage_error(e)


@router.put("/{record_id}", response_model=Record)
def update_record_by_id(
    record_id: str,
    body: UpdateRecordInput,
    repo: RecordRepository = Depends(get_repository),
):
    log = LogContext("UPDATE_RECORD")
    log.set_entity("record", record_id)
    log.set_payload(body.changes())
    try:
        rec = repo.update(record_id, body)
    except NotFoundError as e:
        log.write("ERROR", str(e))
        return _not_found(e)
    except StorageError as e:
        log.write("ERROR", str(e))
        return _storage_error(e)
    log.set_after(rec.dict())
    log.write("OK")
    return rec


@router.delete("/{record_id}")
def delete_record_by_id(record_id: str, repo: RecordRepository = Depends(get_repository)):
    log = LogContext("DELETE_RECORD")
    log.set_entity("record", record_id)
    try:
        deleted = repo.delete(record_id)
    except NotFoundError as e:
        log.write("ERROR", str(e))
        return _not_found(e)
    except StorageError as e:
        log.write("ERROR", str(e))
        return _storage_error(e)
    log.write("OK")
    return {"id": deleted, "message": DELETED_MESSAGE}
