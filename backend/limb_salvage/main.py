"""
Limb Salvage Decision Support API
Diabetic foot limb salvage scoring, treatment recommendations and
amputation level guidance.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api import limb_salvage
from .core.audit_middleware import AuditMiddleware
from .core.config import settings
from .core.logging import configure_logging

configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

app = FastAPI(
    title="Limb Salvage Decision Support API",
    description=(
        "Scores diabetic foot assessments across wound, ischemia, infection, renal, "
        "comorbidity, age and nutrition domains, and suggests management, "
        "amputation level and tiered clinical recommendations."
    ),
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AuditMiddleware)

app.include_router(limb_salvage.router, prefix=settings.API_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}
