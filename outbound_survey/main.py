# outbound_survey/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from outbound_survey.config import settings
from outbound_survey.db import ResultStore
from outbound_survey.api.routes import survey


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = ResultStore.open(settings.database_url)
    yield
    app.state.store.close()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.include_router(survey.router, prefix="/v1")


@app.get("/")
def root():
    return {"message": f"{settings.app_name} callbacks"}
