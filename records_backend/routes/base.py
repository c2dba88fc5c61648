from fastapi import APIRouter

APP_NAME = "records-api"
APP_VERSION = "0.1.0"

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/version")
def version():
    return {"app": APP_NAME, "version": APP_VERSION}
