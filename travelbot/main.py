# Role: FastAPI app bootstrap. Loads environment config early, registers routers, maps core errors to HTTP
# status codes and exposes health/docs endpoints.

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import travelbot.config
travelbot.config.load_env()

from travelbot.api.chat import router as chat_router
from travelbot.api.state import router as state_router
from travelbot.core.errors import (
    FlightSearchError,
    FlightSearchParamsInvalid,
    ModelInvocationError,
    SessionNotFound,
)

app = FastAPI(title="Travel Interview Chatbot API", version="0.1.0")
app.include_router(chat_router)
app.include_router(state_router)


@app.exception_handler(SessionNotFound)
def session_not_found(_: Request, exc: SessionNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ModelInvocationError)
def model_invocation_failed(_: Request, exc: ModelInvocationError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(FlightSearchParamsInvalid)
def flight_params_invalid(_: Request, exc: FlightSearchParamsInvalid) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.errors})


@app.exception_handler(FlightSearchError)
def flight_search_failed(_: Request, exc: FlightSearchError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/")
def root() -> dict:
    # Role: quick discoverability for clients (where are docs/health).
    return {
        "message": "Travel Interview Chatbot API is running",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
