"""FastAPI app exposing the council pipeline over HTTP."""

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.config_loader import ServerConfig
from room_council.models import AgentResponse
from room_council.pipeline import CouncilPipeline

logger = logging.getLogger(__name__)

SERVICE_NAME = "Room Council API"
QUERY_REQUIRED = "Query is required"


class MultiAgentRequest(BaseModel):
    query: str | None = None


class AgentResponseOut(BaseModel):
    agentId: int
    role: str
    content: str
    ok: bool


class MultiAgentResponse(BaseModel):
    insights: list[AgentResponseOut]
    critiques: list[AgentResponseOut]
    finalOutput: str
    degraded: bool


class AgentInfo(BaseModel):
    agentId: int
    role: str
    focus: str


class AgentsResponse(BaseModel):
    agents: list[AgentInfo]
    agent_model: str
    lead_model: str


def _to_out(response: AgentResponse) -> AgentResponseOut:
    return AgentResponseOut(
        agentId=response.agent_id,
        role=response.role,
        content=response.content,
        ok=response.ok,
    )


def get_pipeline(request: Request) -> CouncilPipeline:
    return request.app.state.pipeline


router = APIRouter()


@router.get("/")
async def root():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/api/agents", response_model=AgentsResponse)
async def list_agents(pipeline: CouncilPipeline = Depends(get_pipeline)):
    return AgentsResponse(
        agents=[
            AgentInfo(agentId=i, role=role.label, focus=role.focus)
            for i, role in enumerate(pipeline.roles)
        ],
        agent_model=pipeline.agent_provider.model_string(),
        lead_model=pipeline.lead_provider.model_string(),
    )


@router.post("/api/multi-agent", response_model=MultiAgentResponse)
async def multi_agent(request: MultiAgentRequest, pipeline: CouncilPipeline = Depends(get_pipeline)):
    """Run insight, critique and synthesis stages for one query."""
    if not request.query or not request.query.strip():
        raise HTTPException(status_code=400, detail=QUERY_REQUIRED)

    result = await pipeline.run(request.query)
    return MultiAgentResponse(
        insights=[_to_out(r) for r in result.insights],
        critiques=[_to_out(r) for r in result.critiques],
        finalOutput=result.final_output,
        degraded=result.degraded,
    )


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request body: %s", exc.errors())
    return JSONResponse(status_code=400, content={"error": QUERY_REQUIRED})


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(pipeline: CouncilPipeline, server_config: ServerConfig | None = None) -> FastAPI:
    """Build the app around an already-wired pipeline."""
    server_config = server_config or ServerConfig()

    app = FastAPI(title=SERVICE_NAME)
    app.state.pipeline = pipeline

    if server_config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=server_config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)
    app.include_router(router)
    return app
