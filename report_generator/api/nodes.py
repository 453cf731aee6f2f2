"""Node API routes.

Lists node descriptions and runs a node over a batch of records.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from report_generator.api.deps import get_factory, get_node
from report_generator.api.schemas import (
    ExecuteNodeRequest,
    ExecuteNodeResponse,
    ItemSchema,
    NodeDescriptionSchema,
    NodeErrorResponse,
)
from report_generator.core.factory import ComponentFactory
from report_generator.interfaces.node import BaseNode, NodeOperationError
from report_generator.runtime.context import LocalExecutionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nodes", tags=["nodes"])


@router.get("", response_model=list[NodeDescriptionSchema])
async def list_nodes(
    factory: ComponentFactory = Depends(get_factory),
) -> list[NodeDescriptionSchema]:
    """List the nodes this service can run."""
    return [
        NodeDescriptionSchema.model_validate(description)
        for description in factory.list_nodes()
    ]


@router.get("/{node_name}", response_model=NodeDescriptionSchema)
async def describe_node(node: BaseNode = Depends(get_node)) -> NodeDescriptionSchema:
    """Return the description and parameter schema of one node."""
    return NodeDescriptionSchema.model_validate(node.description)


@router.post(
    "/{node_name}/execute",
    response_model=ExecuteNodeResponse,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": NodeErrorResponse}},
)
async def execute_node(
    request: ExecuteNodeRequest,
    node: BaseNode = Depends(get_node),
) -> ExecuteNodeResponse:
    """Run a node over a batch of records.

    Items are processed in order; the first failing item aborts the run.

    Args:
        request: Node-level parameters and the input items.
        node: The node addressed by the path.

    Returns:
        ExecuteNodeResponse with one output item per input item.

    Raises:
        HTTPException: 422 if the node rejects an item.
    """
    node_name = node.description.name
    logger.info(f"Executing node {node_name} over {len(request.items)} items")

    context = LocalExecutionContext(
        node,
        items=[item.to_execution_data() for item in request.items],
        parameters=request.parameters,
        item_parameters=[item.parameters for item in request.items],
    )

    try:
        outputs = await node.execute(context)
    except NodeOperationError as e:
        logger.warning(f"Node execution failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=NodeErrorResponse(
                detail=e.message,
                node=e.node,
                item_index=e.item_index,
                description=e.description,
            ).model_dump(),
        ) from e

    items = outputs[0] if outputs else []
    logger.info(f"Node {node_name} produced {len(items)} items")
    return ExecuteNodeResponse(
        node=node_name,
        items=[ItemSchema.from_execution_data(item) for item in items],
    )
