"""Bundle consolidation API endpoint."""

from fastapi import APIRouter, HTTPException

from golf_configurator.api.dependencies import ConfigDep
from golf_configurator.api.schemas import TransformRequest, TransformResponse
from golf_configurator.bundles.transform import consolidate
from golf_configurator.errors import BundleTransformError

router = APIRouter()


@router.post("", response_model=TransformResponse, response_model_by_alias=True)
async def run_transform(
    request: TransformRequest,
    config: ConfigDep,
) -> TransformResponse:
    """Consolidate purchase-order lines into merge operations.

    Lines sharing a bundleId become one merge operation. Lines without a
    bundleId are left alone.

    Raises:
        HTTPException: 422 if any bundle line has missing, malformed or
            inconsistent metadata. No operations are returned in that case.
    """
    try:
        operations = consolidate(request.lines, config)
    except BundleTransformError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    return TransformResponse(operations=operations, count=len(operations))
