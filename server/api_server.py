"""FastAPI application entry point for docfinder."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import SearchThresholds
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from services.discovery.matcher.MatcherRapidfuzz import MatcherRapidfuzz
from services.discovery.intelligent.IntelligentSearchManager import IntelligentSearchManager
from server.core.DocumentStore import DocumentStore
from server.core.SessionService import SessionNotFoundError, SessionService
from server.routers.WebhookRouter import router as webhook_router
from server.routers.SessionRouter import router as session_router
from server.routers.FilterRouter import router as filter_router
from server.routers.SearchRouter import router as search_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    thresholds = SearchThresholds.from_config(app.state.helper_config)
    matcher = MatcherRapidfuzz()
    llm_client = LLMClientManager(helper_config=app.state.helper_config).get_client()

    logging.info("Booting LLM client...")
    await llm_client.boot()
    app.state.llm_client = llm_client

    strategy = IntelligentSearchManager(
        helper_config=app.state.helper_config,
        llm_client=llm_client,
        matcher=matcher,
        thresholds=thresholds,
    ).get_strategy()

    app.state.document_store = DocumentStore(helper_config=app.state.helper_config)
    app.state.session_service = SessionService(
        helper_config=app.state.helper_config,
        document_store=app.state.document_store,
        matcher=matcher,
        thresholds=thresholds,
        strategy=strategy,
    )
    logging.info(
        "Discovery ready — strategy=%s thresholds canonical=%.2f options=%.2f documents=%.2f",
        strategy.get_strategy_name(),
        thresholds.canonical,
        thresholds.options,
        thresholds.documents,
    )

    await check_connections(llm_client)

    # while the app is running...
    yield

    # when the app shuts down, close the client connection
    logging.info("Shutting down — closing LLM client...")
    await llm_client.close()
    logging.info("LLM client closed.")


app = FastAPI(
    title="docfinder",
    description=(
        "Document discovery for a personal document collection. "
        "Canonicalised filter facets, fuzzy manual search and natural-language AI search "
        "over the documents pushed via POST /webhook/documents."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook_router)
app.include_router(session_router)
app.include_router(filter_router)
app.include_router(search_router)


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Unknown session '%s'" % exc.args[0]})


async def check_connections(llm_client: LLMClientInterface) -> None:
    """Check connectivity to the LLM backend on startup.

    Failures are non-fatal: manual discovery keeps working and AI searches
    end with a notice until the backend becomes reachable.
    """
    try:
        result: httpx.Response = await llm_client.do_healthcheck()
    except httpx.HTTPError as e:
        logging.warning("LLM client '%s' is not reachable: %s. AI search will fail.", llm_client.__class__.__name__, e)
        return
    if not result.is_success:
        logging.warning(
            "LLM client '%s' is not reachable (status %d). AI search will fail.",
            llm_client.__class__.__name__,
            result.status_code,
        )


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting docfinder API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
