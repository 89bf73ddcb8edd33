import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from linkpreview.core.exceptions import ErrorCode, PreviewError
from linkpreview.schemas.preview import PreviewRequest, PreviewResponse
from linkpreview.services.preview import LinkPreview

router = APIRouter()
logger = logging.getLogger(__name__)

# Answered with 422; every other code maps to 502
_CLIENT_ERRORS = {ErrorCode.NO_URL_HAS_BEEN_FOUND, ErrorCode.INVALID_URL}


def get_link_preview(request: Request) -> LinkPreview:
    return request.app.state.link_preview


@router.post(
    "",
    response_model=PreviewResponse,
    summary="Preview a link",
    description="Locate the first URL in the submitted text, follow its redirects, fetch the page and return title, description, canonical URL, icon, images, video and price. Errors carry the stable numeric code (1 no URL, 2 invalid URL, 3 cannot be opened, 4 parse error).",
)
async def create_preview(
    body: PreviewRequest,
    link_preview: LinkPreview = Depends(get_link_preview),
):
    """Build a link preview from free text."""
    try:
        result = await link_preview.get_preview(body.text)
    except PreviewError as e:
        status_code = 422 if e.code in _CLIENT_ERRORS else 502
        return JSONResponse(
            status_code=status_code,
            content=PreviewResponse(success=False, error=e.to_dict()).model_dump(),
        )

    return PreviewResponse(success=True, data=result.to_dict())
