"""Comment submission endpoint.

Each request gets exactly one response: 200 when the comment was written,
400 when the payload is unusable, 500 when the content store write failed.
"""

import orjson
import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import ORJSONResponse
from pydantic import ValidationError

from .dependencies import CommentServiceDep
from .schemas import CreateCommentRequest, ErrorResponse, MessageResponse
from .service import CommentError


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/api", tags=["comments"])

SUBMITTED_MESSAGE = "Comment submitted"
SUBMIT_FAILED_MESSAGE = "Couldn't submit the comment"
INVALID_PAYLOAD_MESSAGE = "Invalid comment payload"


def invalid_payload(error: dict) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": INVALID_PAYLOAD_MESSAGE, "error": error},
    )


@router.post(
    "/createComment",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Submit a comment for moderation",
)
async def create_comment(
    request: Request,
    comment_service: CommentServiceDep,
) -> ORJSONResponse:
    """Write a new, unapproved comment for a post.

    The body is JSON ``{_id, name, email, comment}``. It is parsed whatever
    the Content-Type, since the page sends it as a plain string.
    """
    raw = await request.body()
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("comment_payload_not_json", error=str(e))
        return invalid_payload({"code": "invalid_json", "message": str(e)})

    try:
        data = CreateCommentRequest.model_validate(payload)
    except ValidationError as e:
        fields = [".".join(str(loc) for loc in err["loc"]) for err in e.errors()]
        logger.warning("comment_payload_invalid", fields=fields)
        return invalid_payload(
            {
                "code": "validation_error",
                "message": "Missing or empty fields",
                "fields": fields,
            }
        )

    try:
        await comment_service.submit(data)
    except CommentError as e:
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": SUBMIT_FAILED_MESSAGE, "error": e.to_dict()},
        )

    return ORJSONResponse(
        status_code=status.HTTP_200_OK,
        content={"message": SUBMITTED_MESSAGE},
    )
