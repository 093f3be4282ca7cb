from fastapi import FastAPI
from app.config import APP_NAME
from app.logging_config import configure_logging
from app.repos.pinecone_repo import PineconeRepo
from app.routes import router

configure_logging()

app = FastAPI(
    title=APP_NAME,
    version="1.0.0"
)

# ---------------------------
# Routes
# ---------------------------
app.include_router(router)

# ---------------------------
# Health check
# ---------------------------
@app.get("/", tags=["health"])
def health():
    return {
        "status": "ok",
        "service": APP_NAME
    }


@app.get("/health/index", tags=["health"])
def index_health():
    try:
        ok = PineconeRepo().health()
    except RuntimeError as e:
        return {"status": "disabled", "reason": str(e)}

    return {"status": "ok" if ok else "unreachable"}
