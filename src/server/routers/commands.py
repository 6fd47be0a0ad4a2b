"""Command endpoints for the API."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from mdcommands.command_parser import load_command_batch
from mdcommands.editor import EditOptions, apply_commands_to_markdown, edit_markdown, load_tree
from mdcommands.exceptions import LLMError, MalformedBatchError
from mdcommands.operations import run_operation
from mdcommands.utils.logging_config import get_logger
from server.models import (
    ApplyRequest,
    EditRequest,
    EditResponse,
    ErrorResponse,
    OperationRequest,
    OperationResponse,
    TreeRequest,
    TreeResponse,
)

logger = get_logger(__name__)

router = APIRouter()

COMMON_RESPONSES = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
}


@router.post("/api/tree", response_model=TreeResponse)
async def api_tree(tree_request: TreeRequest) -> TreeResponse:
    """Parse Markdown and return its tree with node ids.

    **Returns**

    - **TreeResponse**: The id-annotated tree that command batches refer to

    """
    tree = load_tree(tree_request.markdown)
    return TreeResponse(tree=tree.to_json_dict(), node_count=sum(1 for _ in tree.walk()))


@router.post("/api/apply", response_model=EditResponse, responses=COMMON_RESPONSES)
async def api_apply(apply_request: ApplyRequest) -> EditResponse | JSONResponse:
    """Apply a command batch to Markdown.

    **Individual commands that fail are skipped and reported; the rest still apply.**

    **Returns**

    - **EditResponse**: Edited Markdown and per-command outcomes

    """
    try:
        batch = load_command_batch({"commands": apply_request.commands})
    except MalformedBatchError as exc:
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)

    result = apply_commands_to_markdown(apply_request.markdown, batch)
    logger.info(
        "Applied command batch",
        extra={"applied": result.report.applied, "skipped": result.report.failed},
    )
    return EditResponse(markdown=result.markdown, report=result.report)


@router.post(
    "/api/edit",
    response_model=EditResponse,
    responses={**COMMON_RESPONSES, status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse}},
)
async def api_edit(edit_request: EditRequest) -> EditResponse | JSONResponse:
    """Ask the model for a command batch and apply it.

    **Returns**

    - **EditResponse**: Edited Markdown and per-command outcomes

    **Errors**

    - **422**: The model reply held no usable command batch
    - **502**: The model API call failed

    """
    options = EditOptions()
    if edit_request.max_text_length is not None:
        options.max_text_length = edit_request.max_text_length

    try:
        result = await edit_markdown(edit_request.markdown, edit_request.instruction, options=options)
    except MalformedBatchError as exc:
        logger.warning("Model reply held no command batch", extra={"error": str(exc)})
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)
    except LLMError as exc:
        logger.error("Model call failed", extra={"error": str(exc)})
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc)

    return EditResponse(markdown=result.markdown, report=result.report)


@router.post(
    "/api/operation",
    response_model=OperationResponse,
    responses={**COMMON_RESPONSES, status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse}},
)
async def api_operation(operation_request: OperationRequest) -> OperationResponse | JSONResponse:
    """Run a model-driven document operation such as a summary or a rewrite.

    **Returns**

    - **OperationResponse**: Revised Markdown or the model's report

    **Errors**

    - **422**: Unknown operation or missing audience
    - **502**: The model API call failed

    """
    try:
        result = await run_operation(
            operation_request.markdown,
            operation_request.operation,
            audience=operation_request.audience,
        )
    except ValueError as exc:
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)
    except LLMError as exc:
        logger.error("Model call failed", extra={"error": str(exc)})
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc)

    return OperationResponse(operation=operation_request.operation, result=result)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=str(exc)).model_dump())
