"""
Web application module for the Teamsheet team-selection engine.

This module contains the Flask server exposing the selection editor as JSON
API endpoints: squad picking, periods, drag-and-drop placement, undo/redo
and saving/loading selections.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from ..models import FormationFormat, FormationTemplates, PlayerRef
from ..services import (
    DropEvent, FixtureSelectionService, PeriodError, SelectionError,
    ServiceFactory, SquadMode, UnknownScopeError
)
from ..services.persistence_service import category_key
from ..utils import APP_TITLE
from ..utils.constants import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Owns the service factory and the selection service of the fixture being
    edited; loading a document swaps the service for a fresh one.
    """

    def __init__(self, fixture_id: Optional[str] = None,
                 fmt: FormationFormat = FormationFormat.SEVEN_A_SIDE):
        self.service_factory = ServiceFactory()
        self.selection_service = self.service_factory.create_fixture_selection_service(
            fixture_id=fixture_id, fmt=fmt
        )

    def replace_service(self, service: FixtureSelectionService) -> None:
        """Swap in a loaded fixture; undo history of the old one is discarded."""
        command_manager = self.selection_service.command_manager
        command_manager.clear_history()
        service.command_manager = command_manager
        self.selection_service = service


def _error_response(error: Exception) -> Tuple[Any, int]:
    """Map engine exceptions to JSON error envelopes."""
    if isinstance(error, UnknownScopeError):
        return jsonify({"success": False, "error": str(error)}), 404
    if isinstance(error, FileNotFoundError):
        return jsonify({"success": False, "error": str(error)}), 404
    if isinstance(error, (SelectionError, ValueError, KeyError, TypeError)):
        return jsonify({"success": False, "error": str(error)}), 400
    logger.exception("Unexpected error handling %s %s", request.method, request.path)
    return jsonify({"success": False, "error": str(error)}), 500


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        state: Application state; a fresh one is created when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app_state = state or WebAppState()
    app.config["TEAMSHEET_STATE"] = app_state

    def _service() -> FixtureSelectionService:
        return app_state.selection_service

    # ==================== Payload builders ==================== #

    def _build_team_data(team_id: str) -> Dict[str, Any]:
        service = _service()
        periods = []
        for period in service.period_manager.get_periods(team_id):
            periods.append({
                **period.to_dict(),
                "display_name": period.display_name,
                "performance_category": service.performance_categories.get(
                    category_key(period.period_id, team_id)
                ),
                "selections": service.get_selections(team_id, period.period_id),
            })
        return {
            "team_id": team_id,
            "captain": service.captains.get(team_id),
            "template": service.get_team_template(team_id).name,
            "periods": periods,
        }

    def _scope_payload(team_id: str, period_id: int) -> Dict[str, Any]:
        service = _service()
        store = service.period_manager.get_store(team_id, period_id)
        return {
            "success": True,
            "team_id": team_id,
            "period_id": period_id,
            "selections": store.to_dict(),
            "selected_player_id": store.selected_player_id,
            "can_undo": service.command_manager.can_undo(),
            "can_redo": service.command_manager.can_redo(),
        }

    # ==================== API Endpoints ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Get the whole selection state of the fixture."""
        try:
            service = _service()
            return jsonify({
                "success": True,
                "title": APP_TITLE,
                "fixture_id": service.fixture_id,
                "format": service.format.value,
                "mode": service.squad_gate.mode.value,
                "squad": service.squad_gate.members,
                "players": [p.to_dict() for p in service.players],
                "selected_players": sorted(service.get_selected_players()),
                "teams": [_build_team_data(tid) for tid in service.period_manager.team_ids()],
                "can_undo": service.command_manager.can_undo(),
                "can_redo": service.command_manager.can_redo(),
                "unsaved_changes": service.has_unsaved_changes,
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/players", methods=["PUT"])
    def set_players():
        """Replace the roster used for the available-players list."""
        try:
            players = [PlayerRef.from_dict(p) for p in _json_body().get("players", [])]
            _service().set_players(players)
            return jsonify({"success": True, "players": [p.to_dict() for p in players]})
        except Exception as e:
            return _error_response(e)

    # ---------- Squad ---------- #

    @app.route("/api/squad/<player_id>", methods=["POST"])
    def add_to_squad(player_id):
        try:
            added = _service().add_player_to_squad(player_id)
            return jsonify({"success": True, "added": added, "squad": _service().squad_gate.members})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/squad/<player_id>", methods=["DELETE"])
    def remove_from_squad(player_id):
        try:
            service = _service()
            removed = service.remove_player_from_squad(player_id)
            return jsonify({
                "success": True,
                "removed": removed,
                "squad": service.squad_gate.members,
                "mode": service.squad_gate.mode.value,
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/squad/mode", methods=["POST"])
    def set_mode():
        """Switch between squad picking and position assignment."""
        try:
            service = _service()
            raw_mode = _json_body().get("mode")
            if raw_mode is None:
                previous = service.squad_gate.mode
                mode = service.squad_gate.toggle_mode()
                changed = mode is not previous
            else:
                mode = SquadMode(raw_mode)
                changed = service.set_mode(mode)
            if not changed:
                return jsonify({
                    "success": False,
                    "error": "Add at least one player to the squad before assigning positions",
                    "mode": service.squad_gate.mode.value,
                }), 400
            return jsonify({"success": True, "mode": service.squad_gate.mode.value})
        except Exception as e:
            return _error_response(e)

    # ---------- Periods ---------- #

    @app.route("/api/teams/<team_id>/periods", methods=["GET"])
    def get_periods(team_id):
        try:
            return jsonify({"success": True, **_build_team_data(team_id)})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/defaults", methods=["POST"])
    def initialize_periods(team_id):
        try:
            periods = _service().ensure_team(team_id)
            return jsonify({"success": True, "periods": [p.to_dict() for p in periods]})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods", methods=["POST"])
    def add_period(team_id):
        try:
            data = _json_body()
            if "duration" not in data:
                raise PeriodError("Period duration is required")
            period = _service().add_period(
                team_id,
                name=data.get("name", ""),
                duration=data["duration"],
                half=int(data["half"]) if data.get("half") is not None else None,
                copy_selections=bool(data.get("copy_selections", False)),
            )
            return jsonify({"success": True, "period": period.to_dict()}), 201
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>", methods=["PATCH"])
    def edit_period(team_id, period_id):
        try:
            data = _json_body()
            updates = {k: data[k] for k in ("name", "duration") if k in data}
            period = _service().edit_period(team_id, period_id, **updates)
            if period is None:
                raise UnknownScopeError(f"No period {period_id} for team {team_id}")
            return jsonify({"success": True, "period": period.to_dict()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>", methods=["DELETE"])
    def delete_period(team_id, period_id):
        try:
            if not _service().delete_period(team_id, period_id):
                raise UnknownScopeError(f"No period {period_id} for team {team_id}")
            return jsonify({"success": True})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/category", methods=["PUT"])
    def set_category(team_id, period_id):
        try:
            category = _json_body().get("performance_category", "")
            _service().set_performance_category(team_id, period_id, category)
            return jsonify({"success": True, "performance_category": category})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/captain", methods=["PUT"])
    def set_captain(team_id):
        try:
            player_id = _json_body().get("player_id")
            _service().set_captain(team_id, player_id)
            return jsonify({"success": True, "captain": player_id})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/template", methods=["PUT"])
    def set_template(team_id):
        try:
            template = _service().set_team_template(team_id, _json_body().get("template", ""))
            return jsonify({"success": True, "template": template.to_dict()})
        except Exception as e:
            return _error_response(e)

    # ---------- Selections ---------- #

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/selections", methods=["GET"])
    def get_selections(team_id, period_id):
        try:
            return jsonify(_scope_payload(team_id, period_id))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/selections", methods=["PUT"])
    def replace_selections(team_id, period_id):
        """Replace a lineup with externally loaded state."""
        try:
            selections = _json_body().get("selections", {})
            if not isinstance(selections, dict):
                raise ValueError("selections must be an object keyed by slot id")
            changed = _service().replace_selections(team_id, period_id, selections)
            return jsonify({**_scope_payload(team_id, period_id), "changed": changed})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/select", methods=["POST"])
    def select_player(team_id, period_id):
        """Toggle the tapped player used by the next drop."""
        try:
            _service().select_player(team_id, period_id, _json_body().get("player_id"))
            return jsonify(_scope_payload(team_id, period_id))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/drop", methods=["POST"])
    def drop_player(team_id, period_id):
        """Place a player on a slot (drag-and-drop or tap-to-place)."""
        try:
            data = _json_body()
            to_slot_id = data.get("to_slot_id")
            if not to_slot_id:
                raise ValueError("to_slot_id is required")
            event = DropEvent(
                to_slot_id=to_slot_id,
                position=data.get("position") or to_slot_id,
                player_id=data.get("player_id"),
                from_slot_id=data.get("from_slot_id"),
            )
            changed = _service().drop(team_id, period_id, event)
            return jsonify({**_scope_payload(team_id, period_id), "changed": changed})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/substitutes", methods=["POST"])
    def drop_to_substitutes(team_id, period_id):
        try:
            data = _json_body()
            slot_id = _service().drop_to_substitutes(
                team_id, period_id, data.get("player_id"), data.get("from_slot_id")
            )
            return jsonify({**_scope_payload(team_id, period_id), "slot_id": slot_id})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/slots/<slot_id>", methods=["DELETE"])
    def clear_slot(team_id, period_id, slot_id):
        try:
            changed = _service().remove_from_slot(team_id, period_id, slot_id)
            return jsonify({**_scope_payload(team_id, period_id), "changed": changed})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/available-players", methods=["GET"])
    def available_players(team_id, period_id):
        try:
            players = _service().get_available_players(team_id, period_id)
            return jsonify({"success": True, "players": [p.to_dict() for p in players]})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/<team_id>/periods/<int:period_id>/validate", methods=["GET"])
    def validate_selections(team_id, period_id):
        try:
            result = _service().validate(team_id, period_id)
            return jsonify({"success": True, **result.to_dict()})
        except Exception as e:
            return _error_response(e)

    # ---------- History ---------- #

    @app.route("/api/undo", methods=["POST"])
    def undo():
        try:
            service = _service()
            return jsonify({
                "success": service.undo(),
                "can_undo": service.command_manager.can_undo(),
                "can_redo": service.command_manager.can_redo(),
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/redo", methods=["POST"])
    def redo():
        try:
            service = _service()
            return jsonify({
                "success": service.redo(),
                "can_undo": service.command_manager.can_undo(),
                "can_redo": service.command_manager.can_redo(),
            })
        except Exception as e:
            return _error_response(e)

    # ---------- Persistence ---------- #

    @app.route("/api/save", methods=["POST"])
    def save_selections():
        """Return the selection document for client-side saving."""
        try:
            service = _service()
            document = service.to_json()
            service.mark_saved()
            return jsonify({"success": True, "data": document,
                            "rows": len(document["team_selections"])})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/load", methods=["POST"])
    def load_selections():
        """Load selections from an uploaded document."""
        try:
            document = _json_body().get("data")
            if not isinstance(document, dict):
                return jsonify({"success": False, "error": "No selection data provided"}), 400
            app_state.replace_service(FixtureSelectionService.from_json(document))
            return jsonify({"success": True, "fixture_id": app_state.selection_service.fixture_id})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/formations/<fmt>", methods=["GET"])
    def get_formation_templates(fmt):
        try:
            templates = FormationTemplates.get_templates_for_format(FormationFormat(fmt))
            return jsonify({"success": True, "templates": [t.to_dict() for t in templates]})
        except Exception as e:
            return _error_response(e)

    return app


def run_web_app(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
    """
    app = create_app()
    logger.info("Starting %s on %s:%s", APP_TITLE, host, port)
    app.run(host=host, port=port, debug=False)

