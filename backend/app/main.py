# app/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Routers
from app.routers import export as export_router   # /export/...

# ---------------------------
# Create FastAPI app FIRST
# ---------------------------
app = FastAPI(title="Coveo Ranking Exporter", version="0.1.0")

# ---------------------------
# CORS: the page script posts from the search site's origin
# ---------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Export-Rows"],
)

# ---------------------------
# Register routers
# ---------------------------
app.include_router(export_router.router)       # /export/...

# ---------------------------
# Health routes
# ---------------------------
@app.get("/ping")
def ping():
    return {"message": "pong"}
