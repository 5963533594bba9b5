from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.catalog import router as catalog_router

app = FastAPI(title="Menu Catalog Core")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_router, prefix="/api")


@app.get("/health")
def health():
    return {"ok": True}
