"""
Emergency SOS API endpoints.

One resource, dispatched on `action`: the query string selects it on GET,
the JSON body on POST and PUT. `userId` comes from the query string or,
failing that, from the body.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Body, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from api.deps import get_emergency_service
from core.exceptions import InvalidRequestError
from schemas.emergency import EmergencyResolveData, EmergencyTriggerData
from services.emergency_service import EmergencyService

router = APIRouter()

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def _require_user_id(request: Request, body: Optional[Dict[str, Any]] = None) -> str:
    user_id = request.query_params.get("userId") or (body or {}).get("userId")
    if not user_id:
        raise InvalidRequestError("User ID is required")
    return str(user_id)


def _action_data(body: Dict[str, Any]) -> Dict[str, Any]:
    data = body.get("data") or {}
    if not isinstance(data, dict):
        raise InvalidRequestError("data must be a JSON object")
    return data


def _parse(schema: Type[SchemaType], data: Dict[str, Any]) -> SchemaType:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid data: {e.errors()[0].get('msg')}")


@router.options("")
async def emergency_preflight():
    return Response(status_code=status.HTTP_200_OK)


@router.get("")
def get_emergency(
    request: Request,
    service: EmergencyService = Depends(get_emergency_service),
):
    """Read settings, history, the active emergency or a status summary."""
    user_id = _require_user_id(request)
    action = request.query_params.get("action")

    if action == "settings":
        return {"settings": service.get_settings(user_id).to_wire()}

    if action == "history":
        return {"history": [e.to_wire() for e in service.get_history(user_id)]}

    if action == "active":
        active = service.get_active(user_id)
        return {"active": active.to_wire() if active else None}

    if action == "status":
        return {"status": service.get_status(user_id).to_wire()}

    raise InvalidRequestError("Invalid action")


@router.post("")
def post_emergency(
    request: Request,
    body: Optional[Dict[str, Any]] = Body(default=None),
    service: EmergencyService = Depends(get_emergency_service),
):
    """Trigger an emergency, update settings or add a contact."""
    body = body or {}
    user_id = _require_user_id(request, body)
    action = body.get("action")
    data = _action_data(body)

    if action == "trigger":
        trigger_data = _parse(EmergencyTriggerData, data)
        result = service.trigger(
            user_id,
            trigger_method=trigger_data.trigger_method,
            location=trigger_data.location,
        )
        payload = result.to_wire()
        payload["message"] = "Emergency SOS activated successfully"
        return payload

    if action == "update-settings":
        return {"settings": service.update_settings(user_id, data).to_wire()}

    if action == "add-contact":
        contact = service.add_contact(user_id, data)
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"contact": contact.to_wire()},
        )

    raise InvalidRequestError("Invalid action")


@router.put("")
def put_emergency(
    request: Request,
    body: Optional[Dict[str, Any]] = Body(default=None),
    service: EmergencyService = Depends(get_emergency_service),
):
    """Update a contact or resolve the active emergency."""
    body = body or {}
    user_id = _require_user_id(request, body)
    action = body.get("action")
    data = _action_data(body)

    if action == "update-contact":
        contact_id = data.get("id")
        if not contact_id:
            raise InvalidRequestError("Contact ID is required")
        changes = {k: v for k, v in data.items() if k != "id"}
        contact = service.update_contact(user_id, str(contact_id), changes)
        return {"contact": contact.to_wire()}

    if action == "resolve-emergency":
        resolve_data = _parse(EmergencyResolveData, data)
        emergency = service.resolve(user_id, resolve_data.resolution)
        return {
            "message": "Emergency resolved",
            "emergency": emergency.to_wire(),
        }

    raise InvalidRequestError("Invalid action")
