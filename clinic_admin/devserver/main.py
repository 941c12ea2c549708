"""
Dev server: a local stand-in for the clinic REST API

- Same paths and envelopes the admin client expects
- JSON file storage under CLINIC_DATA_DIR, seeded with demo staff and templates
- CORS configured for local front-end development

Run with: uvicorn clinic_admin.devserver.main:app --reload
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic_admin.core.config import CORS_ORIGINS
from clinic_admin.devserver.api import router
from clinic_admin.devserver.middleware import TimingMiddleware
from clinic_admin.devserver.seed import seed_demo_data


@asynccontextmanager
async def lifespan(app: FastAPI):
    seed_demo_data()
    yield


app = FastAPI(title="Clinic API (dev)", lifespan=lifespan)

# Logs request duration and status for all requests
app.add_middleware(TimingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    """
    Basic health check
    """
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="127.0.0.1", port=5000)
