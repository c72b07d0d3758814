from flask import Blueprint, request, jsonify

from security.owner import require_owner
from services import get_config_service
from utils.audit import log_event

config_bp = Blueprint("config", __name__, url_prefix="/api/config")


@config_bp.get("")
def get_config():
    config = get_config_service().get_config(request.args.get("tenant"))
    return jsonify(success=True, config=config.to_dict()), 200


@config_bp.get("/slots")
def get_slot_config():
    config = get_config_service().get_config(request.args.get("tenant"))
    return jsonify(slotsPerHour=config.slots_per_hour, showAvailability=True), 200


@config_bp.post("")
@require_owner
def update_config():
    data = request.get_json(silent=True) or {}
    config = get_config_service().set_config(data.get("tenant"), data.get("slotsPerHour"))

    log_event("CONFIG_UPDATE", actor="owner", entity="config", entity_id=config.tenant,
              metadata={"slotsPerHour": config.slots_per_hour})
    return jsonify(success=True, config=config.to_dict()), 200
