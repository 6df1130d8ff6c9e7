"""
Tests for API Pydantic schemas.

Validates that:
- Request/response models serialize correctly
- Request validation rejects bad input
- Error codes are properly structured
- The OpenAPI schema lists every endpoint
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_create_session_defaults(self):
        """CreateSessionRequest defaults to a human first seat against a random bot."""
        from vanguard.api.schemas import CreateSessionRequest, BotKind

        request = CreateSessionRequest()

        assert request.human_player_index == 0
        assert request.bot_kind == BotKind.RANDOM
        assert request.random_seed is None
        assert request.auto_pass

    def test_create_session_bot_vs_bot(self):
        from vanguard.api.schemas import CreateSessionRequest, BotKind

        request = CreateSessionRequest.model_validate(
            {"human_player_index": None, "bot_kind": "advisor", "random_seed": 3}
        )
        assert request.human_player_index is None
        assert request.bot_kind == BotKind.ADVISOR

    @pytest.mark.parametrize("data", [
        {"human_player_index": 2},
        {"human_player_index": -1},
        {"bot_kind": "genius"},
    ])
    def test_create_session_validation(self, data):
        from vanguard.api.schemas import CreateSessionRequest

        with pytest.raises(ValidationError):
            CreateSessionRequest.model_validate(data)

    def test_apply_action_validation(self):
        """Action indices are non-negative."""
        from vanguard.api.schemas import ApplyActionRequest

        assert ApplyActionRequest(action_index=0).action_index == 0
        with pytest.raises(ValidationError):
            ApplyActionRequest(action_index=-1)
        with pytest.raises(ValidationError):
            ApplyActionRequest()

    def test_advice_request_validation(self):
        from vanguard.api.schemas import AdviceRequest

        request = AdviceRequest(time_limit=0.5, max_iterations=0)
        assert request.max_iterations == 0
        with pytest.raises(ValidationError):
            AdviceRequest(time_limit=0)
        with pytest.raises(ValidationError):
            AdviceRequest(max_iterations=-5)

    def test_session_response_schema(self):
        from vanguard.api.schemas import SessionResponse, SessionStatus

        response = SessionResponse(session_id="abc", status=SessionStatus.YOUR_TURN, phase="mulligan")
        data = response.model_dump(mode="json")

        assert data["status"] == "your_turn"
        assert data["api_version"] == "v1"
        assert data["human_player_index"] is None

    def test_error_response_schema(self):
        """ErrorResponse has required fields."""
        from vanguard.api.schemas import ErrorResponse, ErrorCode

        error = ErrorResponse(
            error="Action index 40 out of range",
            error_code=ErrorCode.INVALID_ACTION_INDEX,
            details={"legal_action_count": 32},
        )
        data = error.model_dump(mode="json")

        assert data["error_code"] == "INVALID_ACTION_INDEX"
        assert data["details"]["legal_action_count"] == 32
        assert data["api_version"] == "v1"

    def test_game_state_response_schema(self):
        """GameStateResponse accepts a snapshot of a live match."""
        from vanguard.api.schemas import GameStateResponse, SessionStatus
        from vanguard.api.service import snapshot_state
        from vanguard.games.standard import setup_match

        snapshot = snapshot_state(setup_match(seed=4), viewer=1, human_player_index=1)
        response = GameStateResponse(session_id="abc", status=SessionStatus.YOUR_TURN, **snapshot)

        assert response.phase == "mulligan"
        assert response.players[1].is_human
        assert len(response.players[1].hand) == 5
        assert response.players[0].hand == []
        assert response.current_battle is None
        board = {circle.name: circle for circle in response.players[0].board}
        assert board["V"].unit.grade == 0
        assert board["R1"].unit is None

    def test_ranked_action_schema(self):
        from vanguard.api.schemas import RankedActionInfo

        ranked = RankedActionInfo(index=2, action_type="RIDE", description="Ride Cadet of Dawn", score=0.7)
        data = ranked.model_dump()

        assert data["visits"] == 0
        assert data["score"] == 0.7
        assert data["index"] == 2


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        """All required error codes are defined."""
        from vanguard.api.schemas import ErrorCode

        required_codes = [
            "SESSION_NOT_FOUND",
            "INVALID_ACTION_INDEX",
            "NOT_YOUR_TURN",
            "ACTION_FAILED",
            "GAME_OVER",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from vanguard.api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from vanguard.api.app import app
        from fastapi.openapi.utils import get_openapi

        return get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

    def test_openapi_schema_generates(self, schema):
        """OpenAPI schema generates without errors."""
        assert "paths" in schema
        assert "components" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        """Response models appear in OpenAPI schema."""
        schemas = schema["components"]["schemas"]

        required_schemas = [
            "SessionResponse",
            "GameStateResponse",
            "LegalActionsResponse",
            "ApplyActionResponse",
            "AdviceResponse",
            "ErrorResponse",
        ]

        for name in required_schemas:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_have_response_models(self, schema):
        """All main endpoints specify response models."""
        paths = schema["paths"]

        assert "200" in paths["/api/v1/sessions"]["post"]["responses"]
        assert "200" in paths["/api/v1/sessions/{session_id}/state"]["get"]["responses"]

        actions = paths["/api/v1/sessions/{session_id}/actions"]
        assert "get" in actions and "post" in actions
        assert "409" in actions["post"]["responses"]

        assert "/api/v1/sessions/{session_id}/advice" in paths
        assert "/health" in paths
