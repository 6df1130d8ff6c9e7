"""
FastAPI Application - REST API for the Vanguard engine and advisor.

Endpoints:
    POST   /api/v1/sessions                  Create game session
    GET    /api/v1/sessions                  List active sessions
    GET    /api/v1/sessions/{id}             Get session status
    DELETE /api/v1/sessions/{id}             End session
    GET    /api/v1/sessions/{id}/state       Get game state (masked for the viewer)
    GET    /api/v1/sessions/{id}/actions     List legal actions
    POST   /api/v1/sessions/{id}/actions     Apply a legal action by index
    POST   /api/v1/sessions/{id}/advice      Rank legal actions with the engine

Play Flow:
    1. POST /sessions sets up a match; bot seats that act first are run
    2. GET /actions lists the human's options
    3. POST /actions applies one; bot seats play until the human decides again
    4. POST /advice at any point for a ranked list of the options

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union

API_VERSION = "1.0.0"


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Query
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from ..config import Settings
    from ..session import SessionManager
    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        ApplyActionRequest,
        AdviceRequest,
        # Response models
        SessionResponse,
        GameStateResponse,
        LegalActionsResponse,
        ApplyActionResponse,
        AdviceResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    settings = Settings.from_env()

    app = FastAPI(
        title="Vanguard Engine API",
        description="""
Two-player card game engine with a Monte Carlo tree search advisor.

## Play Flow

1. `POST /sessions` sets up a match against a bot
2. `GET /actions` lists your options, `POST /actions` applies one by index
3. The bot plays until you have a decision to make
4. `POST /advice` ranks your options with the evaluation engine

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_ACTION_INDEX` | Index not in the legal action list |
| `NOT_YOUR_TURN` | A bot has the next decision |
| `ACTION_FAILED` | The engine rejected the action |
| `GAME_OVER` | The match has ended |
        """,
        version=API_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(session_manager=SessionManager(settings.search))

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.NOT_YOUR_TURN: 409,
        ErrorCode.GAME_OVER: 409,
    }

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def from_service_error(error: ErrorResponse) -> JSONResponse:
        return make_error_response(
            error.error_code,
            error.error,
            status_code=status_codes.get(error.error_code, 400),
            details=error.details,
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid parameters"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session with the demo decks.

        Set `human_player_index` to null for a bot vs bot session that
        can still be inspected and advised on.
        """
        try:
            return api_service.create_session(body)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a game session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return from_service_error(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state(
        session_id: str,
        viewer: Annotated[Optional[int], Query(ge=0, le=1, description="Seat to reveal")] = None,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Get the current game state; hands other than the viewer's are masked."""
        response = api_service.get_game_state(session_id, viewer)
        if isinstance(response, ErrorResponse):
            return from_service_error(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List legal actions",
    )
    async def get_legal_actions(session_id: str) -> Union[LegalActionsResponse, JSONResponse]:
        """List the acting player's legal actions with their indices."""
        response = api_service.get_legal_actions(session_id)
        if isinstance(response, ErrorResponse):
            return from_service_error(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ApplyActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid action index"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Not your turn or game over"},
        },
        tags=["Game"],
        summary="Apply a legal action",
    )
    async def apply_action(
        session_id: str,
        body: ApplyActionRequest,
    ) -> Union[ApplyActionResponse, JSONResponse]:
        """
        Apply the action at `action_index` of the legal action list.

        **Request Body:**
        ```json
        {"action_index": 3}
        ```
        """
        response = api_service.apply_action(session_id, body)
        if isinstance(response, ErrorResponse):
            return from_service_error(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/advice",
        response_model=AdviceResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Game over"},
        },
        tags=["Advisor"],
        summary="Rank legal actions",
    )
    async def get_advice(
        session_id: str,
        body: Optional[AdviceRequest] = None,
    ) -> Union[AdviceResponse, JSONResponse]:
        """
        Run the evaluation engine on the current position.

        The budget defaults to the server settings; `time_limit` and
        `max_iterations` override it for this request.
        """
        response = api_service.get_advice(session_id, body)
        if isinstance(response, ErrorResponse):
            return from_service_error(response)
        return response

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="vanguard-engine",
            version=API_VERSION,
        )

    @app.get("/", tags=["System"])
    async def root():
        """API root - redirects to docs."""
        return {
            "service": "Vanguard Engine API",
            "version": API_VERSION,
            "environment": settings.env,
            "docs": "/api/docs",
        }

    return app


# For running directly: uvicorn vanguard.api.app:app
app = create_app()
