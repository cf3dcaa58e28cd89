"""
API Faker — Resource Route Handlers
=====================================

What:  The generic REST surface: every verb on /db, /{resource} and
       /{resource}/{item_id}.
How:   Handlers extract path parameters and the body, call ResourceService,
       and wrap the result in a JSONResponse with the right status code.
       Failures are ApiFakerError subclasses rendered by the global handler.

Route Inventory:
    GET    /db                       full store snapshot
    GET    /{resource}               collection or singular value
    GET    /{resource}/{item_id}     one collection item
    POST   /{resource}               create item (201) or replace singular (200)
    PUT    /{resource}               replace singular resource
    PATCH  /{resource}               merge into singular resource
    PUT    /{resource}/{item_id}     replace item
    PATCH  /{resource}/{item_id}     merge into item
    DELETE /{resource}/{item_id}     remove item (204)

/db is registered first so it is never captured by /{resource}.
"""

from typing import Any

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from apifaker.routes.dependencies import (
    get_resource_service,
    read_json_body,
    warn_on_non_json_content_type,
)
from apifaker.schemas.errors import ErrorResponse
from apifaker.services.resource_service import ResourceService

router = APIRouter(tags=["Resources"])

_NOT_FOUND = {404: {"description": "Resource, collection or item not found", "model": ErrorResponse}}
_WRITE_ERRORS = {
    400: {"description": "Body is not a JSON object, or the store rejected it", "model": ErrorResponse},
    403: {"description": "Read-only mode enabled", "model": ErrorResponse},
}


@router.get("/db", summary="Full store snapshot")
async def get_database(
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=service.get_database())


@router.get("/{resource}", responses=_NOT_FOUND, summary="Get a collection or singular resource")
async def get_resource(
    resource: str,
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=service.get_resource(resource))


@router.get("/{resource}/{item_id}", responses=_NOT_FOUND, summary="Get one collection item")
async def get_item(
    resource: str,
    item_id: str,
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=service.get_item(resource, item_id))


@router.post(
    "/{resource}",
    status_code=201,
    responses=_WRITE_ERRORS,
    dependencies=[Depends(warn_on_non_json_content_type)],
    summary="Create a collection item, or replace a singular resource",
)
async def post_resource(
    resource: str,
    body: Any = Depends(read_json_body),
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    """
    201 with the created item (id assigned by the store when missing or taken),
    or 200 with the new value when `resource` is an existing singular resource.
    """
    outcome = await service.post(resource, body)
    return JSONResponse(
        status_code=201 if outcome.created else 200,
        content=outcome.body,
    )


@router.put(
    "/{resource}",
    responses=_WRITE_ERRORS,
    dependencies=[Depends(warn_on_non_json_content_type)],
    summary="Replace a singular resource",
)
async def put_resource(
    resource: str,
    body: Any = Depends(read_json_body),
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=await service.replace_singular(resource, body))


@router.patch(
    "/{resource}",
    responses={**_WRITE_ERRORS, **_NOT_FOUND},
    dependencies=[Depends(warn_on_non_json_content_type)],
    summary="Shallow-merge into a singular resource",
)
async def patch_resource(
    resource: str,
    body: Any = Depends(read_json_body),
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=await service.patch_singular(resource, body))


@router.put(
    "/{resource}/{item_id}",
    responses={**_WRITE_ERRORS, **_NOT_FOUND},
    dependencies=[Depends(warn_on_non_json_content_type)],
    summary="Replace a collection item",
)
async def put_item(
    resource: str,
    item_id: str,
    body: Any = Depends(read_json_body),
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=await service.replace_item(resource, item_id, body))


@router.patch(
    "/{resource}/{item_id}",
    responses={**_WRITE_ERRORS, **_NOT_FOUND},
    dependencies=[Depends(warn_on_non_json_content_type)],
    summary="Shallow-merge into a collection item",
)
async def patch_item(
    resource: str,
    item_id: str,
    body: Any = Depends(read_json_body),
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    return JSONResponse(content=await service.patch_item(resource, item_id, body))


@router.delete(
    "/{resource}/{item_id}",
    status_code=204,
    responses={403: _WRITE_ERRORS[403], **_NOT_FOUND},
    summary="Delete a collection item",
)
async def delete_item(
    resource: str,
    item_id: str,
    service: ResourceService = Depends(get_resource_service),
) -> Response:
    await service.delete_item(resource, item_id)
    return Response(status_code=204)
