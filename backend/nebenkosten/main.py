from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nebenkosten.api import billing
from nebenkosten.db.database import init_db
from nebenkosten.utils.logging import setup_logging

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    yield


app = FastAPI(
    title="Nebenkostenabrechnung API",
    description="Umlage der Betriebskosten auf Mieter und Erstellung der Nebenkostenabrechnung",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(billing.router, prefix="/api/billing", tags=["billing"])


@app.get("/health")
def health_check():
    return {"status": "ok", "version": VERSION}
