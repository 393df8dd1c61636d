"""
Property listing API endpoints: public search and detail, and landlord
management with multipart image uploads.
"""

from fastapi import APIRouter, Depends, Path, Query, Request, status
from typing import Optional

from app.models.property import Property, PropertyStatus
from app.schemas.common import ApiResponse, MessageResponse, PaginatedResponse, form_text
from app.schemas.property import (
    PropertyCreate,
    PropertySearchParams,
    PropertyUpdate,
    SortField,
    SortOrder,
)
from app.services.auth import CurrentUser
from app.services.property import PropertyService
from app.utils.dependencies import (
    PageParams,
    get_optional_user,
    get_property_service,
    require_landlord,
)
from app.utils.file_utils import FileValidator


router = APIRouter(prefix="/properties", tags=["Properties"])


def search_params(
    search: Optional[str] = Query(None, description="Text matched against title, description and city"),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice", description="Minimum monthly price"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice", description="Maximum monthly price"),
    bedrooms: Optional[int] = Query(None, ge=0, description="Minimum number of bedrooms"),
    bathrooms: Optional[float] = Query(None, ge=0, description="Minimum number of bathrooms"),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    pets_allowed: Optional[bool] = Query(None, alias="petsAllowed"),
    furnished: Optional[bool] = Query(None),
    parking: Optional[bool] = Query(None),
    sort_by: SortField = Query(SortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> PropertySearchParams:
    return PropertySearchParams(
        search=search,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        city=city,
        state=state,
        pets_allowed=pets_allowed,
        furnished=furnished,
        parking=parking,
        sort_by=sort_by,
        sort_order=sort_order,
    )


async def _read_images(request: Request, form):
    settings = request.app.state.container.settings
    return await FileValidator.read_uploads(
        form.getlist("images"),
        settings.allowed_image_extensions,
        settings.max_file_size,
        settings.max_property_images,
    )


@router.get(
    "",
    response_model=PaginatedResponse[Property],
    summary="List available properties",
    description="Search available listings with filters, sorting and cursor pagination"
)
async def list_properties(
    params: PropertySearchParams = Depends(search_params),
    page: PageParams = Depends(),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Public listing endpoint.

    Sorting applies within the returned page; follow `nextCursor` for more.
    """
    properties, result = await property_service.search_properties(params, page.limit, page.cursor)
    return page.respond(properties, result)


@router.get(
    "/landlord/my-properties",
    response_model=PaginatedResponse[Property],
    summary="List the caller's properties"
)
async def get_my_properties(
    status_filter: Optional[PropertyStatus] = Query(None, alias="status"),
    page: PageParams = Depends(),
    current_user: CurrentUser = Depends(require_landlord),
    property_service: PropertyService = Depends(get_property_service)
):
    properties, result = await property_service.get_landlord_properties(
        current_user, status=status_filter, limit=page.limit, cursor=page.cursor
    )
    return page.respond(properties, result)


@router.get(
    "/{property_id}",
    response_model=ApiResponse[Property],
    summary="Get property by ID"
)
async def get_property(
    property_id: str = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
):
    property_obj = await property_service.get_property(property_id)
    return ApiResponse(data=property_obj)


@router.post(
    "",
    response_model=ApiResponse[Property],
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing from multipart form fields; nested fields are JSON strings"
)
async def create_property(
    request: Request,
    current_user: CurrentUser = Depends(require_landlord),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Create a new property listing.

    Form fields: title, description, address, price, details (JSON),
    optional coordinates, amenities, availableDate, leaseTerms, and up to
    ten `images` file parts.

    Raises:
        ValidationError: If fields or images are invalid
        RoleRequiredError: If the caller is not a landlord
    """
    form = await request.form()
    property_data = PropertyCreate.from_form(form_text(form))
    images = await _read_images(request, form)

    property_obj = await property_service.create_property(property_data, images, current_user)
    return ApiResponse(data=property_obj, message="Property created successfully")


@router.put(
    "/{property_id}",
    response_model=ApiResponse[Property],
    summary="Update property"
)
async def update_property(
    request: Request,
    property_id: str = Path(..., description="Property ID"),
    current_user: CurrentUser = Depends(require_landlord),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Partially update a listing owned by the caller. New images are appended.
    """
    form = await request.form()
    update_data = PropertyUpdate.from_form(form_text(form))
    images = await _read_images(request, form)

    property_obj = await property_service.update_property(property_id, update_data, images, current_user)
    return ApiResponse(data=property_obj, message="Property updated successfully")


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete property"
)
async def delete_property(
    property_id: str = Path(..., description="Property ID"),
    current_user: CurrentUser = Depends(require_landlord),
    property_service: PropertyService = Depends(get_property_service)
):
    await property_service.delete_property(property_id, current_user)
    return MessageResponse(message="Property deleted successfully")
