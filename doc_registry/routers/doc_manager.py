"""
Doc Manager Router

Action-dispatch endpoint spoken by the editor client:

    GET|POST /api/doc-manager?action=<action>&id=...&version=...

Read-only actions are served on GET; everything else requires POST. A POST
may carry a JSON object body whose fields override the query string.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from doc_registry.core.auth import CurrentUser
from doc_registry.core.errors import InvalidArgumentError
from doc_registry.models.contracts.common import SuccessResponse
from doc_registry.models.contracts.document import (
    AccessPublic,
    DocumentPublic,
    GeneratedIdPublic,
    RoomPublic,
)
from doc_registry.models.enums import RegistryAction
from doc_registry.routers.documents import Registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/doc-manager", tags=["doc-manager"])

# Names older clients still send
ACTION_ALIASES: dict[str, RegistryAction] = {
    "list_by_app": RegistryAction.LIST_BY_TAG,
    "list_by_tool": RegistryAction.LIST_BY_TAG,
    "create_version": RegistryAction.GET_ROOM,
}

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def resolve_action(name: str | None) -> RegistryAction:
    """
    Map a raw action name (or alias) to a RegistryAction.

    Raises:
        InvalidArgumentError: If the action is missing or unknown
    """
    if not name:
        raise InvalidArgumentError("Missing action", field="action")
    if name in ACTION_ALIASES:
        return ACTION_ALIASES[name]
    try:
        return RegistryAction(name)
    except ValueError:
        raise InvalidArgumentError("Unknown action", field="action") from None


def parse_flag(value: Any) -> bool:
    """Interpret 1/true/yes/on (any case) as set; anything else as unset."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def parse_length(value: Any) -> int:
    """Parse the generate_id length, defaulting to 16."""
    if value is None or value == "":
        return 16
    if isinstance(value, bool):
        raise InvalidArgumentError("Invalid length (1-128 allowed)", field="length")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError("Invalid length (1-128 allowed)", field="length") from None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


async def collect_params(request: Request) -> dict[str, Any]:
    """
    Merge query parameters with an optional JSON object body.

    Body fields win over query fields with the same name.
    """
    params: dict[str, Any] = dict(request.query_params)
    if request.method != "POST":
        return params

    raw = await request.body()
    if not raw.strip():
        return params
    try:
        body = json.loads(raw)
    except ValueError:
        raise InvalidArgumentError("Invalid JSON body", field="body") from None
    if not isinstance(body, dict):
        raise InvalidArgumentError("JSON body must be an object", field="body")

    params.update(body)
    return params


@router.api_route("", methods=["GET", "POST"], response_model=None)
async def dispatch(
    request: Request,
    current_user: CurrentUser,
    registry: Registry,
) -> BaseModel | list[DocumentPublic]:
    """
    Dispatch one registry action.

    Returns:
        The action's response shape (document, document list, access,
        room, generated id, or a success flag)

    Raises:
        HTTPException: 405 if the HTTP method does not match the action
        InvalidArgumentError: For a missing or unknown action
    """
    params = await collect_params(request)
    action = resolve_action(_text(params.get("action")))

    required_method = "GET" if action.is_read_only else "POST"
    if request.method != required_method:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=f"Method Not Allowed. Use {required_method} for this action.",
            headers={"Allow": required_method},
        )

    document_id = _text(params.get("id"))
    version = _text(params.get("version"))
    tag = _text(params.get("tag") or params.get("app") or params.get("tool"))
    all_documents = parse_flag(params.get("all"))
    include_deleted = parse_flag(params.get("include_deleted"))
    deleted_only = parse_flag(params.get("show_deleted"))

    logger.debug(
        f"Dispatching action {action.value}",
        extra={"action": action.value, "doc_id": document_id, "user": current_user.username},
    )

    if action == RegistryAction.CREATE:
        doc = await registry.create(
            current_user,
            document_id,
            tag=tag,
            title=_text(params.get("title")),
            version=version,
        )
        return DocumentPublic.from_document(doc)

    if action in (RegistryAction.LIST, RegistryAction.LIST_BY_TAG):
        if action == RegistryAction.LIST_BY_TAG:
            documents = await registry.list_by_tag(
                current_user,
                tag,
                all_documents=all_documents,
                include_deleted=include_deleted,
                deleted_only=deleted_only,
            )
        else:
            documents = await registry.list_documents(
                current_user,
                tag=tag,
                all_documents=all_documents,
                include_deleted=include_deleted,
                deleted_only=deleted_only,
            )
        return [DocumentPublic.from_document(doc) for doc in documents]

    if action == RegistryAction.RENAME:
        doc = await registry.rename(current_user, document_id, _text(params.get("title")))
        return DocumentPublic.from_document(doc)

    if action == RegistryAction.SHARE:
        doc = await registry.share(
            current_user,
            document_id,
            _text(params.get("username")),
            params.get("permissions"),
        )
        return DocumentPublic.from_document(doc)

    if action == RegistryAction.REVOKE:
        doc = await registry.revoke(current_user, document_id, _text(params.get("username")))
        return DocumentPublic.from_document(doc)

    if action == RegistryAction.DELETE:
        await registry.delete(current_user, document_id)
        return SuccessResponse()

    if action == RegistryAction.RESTORE:
        await registry.restore(current_user, document_id)
        return SuccessResponse()

    if action == RegistryAction.PERMANENT_DELETE:
        await registry.permanent_delete(current_user, document_id)
        return SuccessResponse()

    if action == RegistryAction.ACCESS:
        grant = await registry.access(current_user, document_id, version)
        return AccessPublic(
            id=grant.document_id,
            version=grant.version,
            room=grant.room,
            user=grant.user,
            permissions=grant.permissions,
        )

    if action == RegistryAction.GET_ROOM:
        assignment = await registry.get_or_create_room(current_user, document_id, version)
        return RoomPublic(
            id=assignment.document_id,
            version=assignment.version,
            room=assignment.room,
            created=assignment.created,
        )

    # RegistryAction.GENERATE_ID
    return GeneratedIdPublic(id=registry.generate_id(parse_length(params.get("length"))))
