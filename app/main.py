from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from strawberry.fastapi import GraphQLRouter

import app.core.config as config
from app.api import auth, banners, billing, instructors, menu, notifications, pages, purchases
from app.auth.middleware import DashboardGateMiddleware
from app.core.logging_config import get_logger, setup_logging
from app.graphql.context import build_context
from app.graphql.schema import schema

setup_logging()
logger = get_logger("main")

app = FastAPI(title="Giro Admin API")

app.add_middleware(DashboardGateMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (auth, banners, billing, purchases, menu, instructors, notifications, pages):
    app.include_router(module.router)

graphql_app = GraphQLRouter(
    schema=schema,
    context_getter=build_context,
    graphql_ide="graphiql" if config.ENVIRONMENT != "production" else None,
)
app.include_router(graphql_app, prefix="/graphql")

Path(config.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")

logger.info(f"Giro admin API ready ({config.ENVIRONMENT})")
