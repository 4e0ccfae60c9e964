import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Base, engine, ensure_schema
from .settings import settings
from .routers import auth
from .routers import barriers, learning_styles
from .routers import students
from .routers import activities
from .routers import interventions
from .routers import wizard
from .routers import assistant
from .routers import dashboard

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
log = logging.getLogger(__name__)

app = FastAPI(title="Aula Inclusiva API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origin_list(),
	allow_credentials=False,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(auth.router)
app.include_router(barriers.router)
app.include_router(learning_styles.router)
app.include_router(students.router)
app.include_router(activities.router)
app.include_router(interventions.router)
app.include_router(wizard.router)
app.include_router(assistant.router)
app.include_router(dashboard.router)

@app.get("/info")
def root():
	return {"status": "ok", "llm_configured": settings.llm_configured}

@app.on_event("startup")
def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Apply lightweight dev migrations
	ensure_schema()
	log.info("Aula Inclusiva API ready (llm_configured=%s)", settings.llm_configured)
