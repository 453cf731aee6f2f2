"""Generate Report node.

Renders a DOCX template carried as binary data with JSON data and
attaches the generated document to the output record.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from report_generator.interfaces.node import (
    BaseExecutionContext,
    BaseNode,
    NodeDescription,
    NodeExecutionData,
    NodeOperationError,
    NodeProperty,
)
from report_generator.interfaces.template import (
    DEFAULT_CONTAINER_TAG_CLOSE,
    DEFAULT_CONTAINER_TAG_OPEN,
    DEFAULT_TAG_END,
    DEFAULT_TAG_START,
    BaseTemplateRenderer,
    TagDelimiters,
)

logger = logging.getLogger(__name__)

OUTPUT_EXTENSION = "docx"

GENERATE_REPORT_DESCRIPTION = NodeDescription(
    display_name="Generate Report",
    name="generateReport",
    icon="file:report_template.svg",
    group=("transform",),
    version=1,
    description="Generate a report from a DocX Template and JSON data.",
    defaults={"name": "Generate Report"},
    properties=(
        NodeProperty(
            display_name="Template Key",
            name="sourceKey",
            type="string",
            default="template",
            required=True,
            placeholder="template",
            description=(
                "The name of the binary key to get the template from. Deep keys "
                'can be given with dot-notation, for example "level1.level2.currentKey".'
            ),
        ),
        NodeProperty(
            display_name="Output Key",
            name="destinationKey",
            type="string",
            default="report",
            required=True,
            placeholder="report",
            description="The name of the binary key to store the generated report under.",
        ),
        NodeProperty(
            display_name="Input Data",
            name="data",
            type="string",
            default="",
            required=True,
            placeholder="data",
            description="Data to fill the report with, as a JSON string.",
        ),
        NodeProperty(
            display_name="Output File Name",
            name="outputFileName",
            type="string",
            default="Report",
            required=True,
            placeholder="Report",
            description="File name of the output document, without extension.",
        ),
        NodeProperty(
            display_name="Tag Delimiters",
            name="tagDelimiters",
            type="collection",
            default={
                "tagStart": DEFAULT_TAG_START,
                "tagEnd": DEFAULT_TAG_END,
                "containerTagOpen": DEFAULT_CONTAINER_TAG_OPEN,
                "containerTagClose": DEFAULT_CONTAINER_TAG_CLOSE,
            },
            options=(
                NodeProperty("Tag Start Delimiters", "tagStart", "string", DEFAULT_TAG_START),
                NodeProperty("Tag End Delimiters", "tagEnd", "string", DEFAULT_TAG_END),
                NodeProperty(
                    "Container Tag Open", "containerTagOpen", "string", DEFAULT_CONTAINER_TAG_OPEN
                ),
                NodeProperty(
                    "Container Tag Close", "containerTagClose", "string", DEFAULT_CONTAINER_TAG_CLOSE
                ),
            ),
        ),
    ),
)


class GenerateReportNode(BaseNode):
    """Fills a DOCX template with JSON data, one record at a time.

    Records are processed in order and the first failing record aborts
    the run with a NodeOperationError naming that record.
    """

    description = GENERATE_REPORT_DESCRIPTION

    def __init__(self, renderer: BaseTemplateRenderer) -> None:
        """Initialize the node.

        Args:
            renderer: Template rendering strategy.
        """
        self._renderer = renderer

    async def execute(self, context: BaseExecutionContext) -> list[list[NodeExecutionData]]:
        """Render one report per input record.

        Args:
            context: Host services for this run.

        Returns:
            A single output holding one record per input record.

        Raises:
            NodeOperationError: If the data is not valid JSON, the record has
                no binary data, or the template cannot be rendered.
        """
        items = context.get_input_data()
        node_name = context.get_node().name
        return_data: list[NodeExecutionData] = []

        logger.info(f"Generating reports for {len(items)} items")

        for item_index, item in enumerate(items):
            source_key = context.get_node_parameter("sourceKey", item_index)
            destination_key = context.get_node_parameter("destinationKey", item_index)
            data = context.get_node_parameter("data", item_index)
            output_file_name = context.get_node_parameter("outputFileName", item_index)
            delimiters = self._get_delimiters(context, node_name, item_index)
            context.logger.debug("tag delimiters", **delimiters.model_dump(by_alias=True))

            template_data = self._parse_data(data, node_name, item_index)

            if not item.binary:
                raise NodeOperationError(
                    node_name, "No binary data exists on item!", item_index=item_index
                )

            template = await context.get_binary_data_buffer(item_index, source_key)

            try:
                document = await self._renderer.render(template, template_data, delimiters)
            except Exception as e:
                raise NodeOperationError(
                    node_name,
                    f"Something went wrong creating the report. {e}",
                    item_index=item_index,
                ) from e

            binary = await context.prepare_binary_data(
                document, f"{output_file_name}.{OUTPUT_EXTENSION}"
            )
            return_data.append(
                NodeExecutionData(
                    json={},
                    binary={destination_key: binary},
                    paired_item=item_index,
                )
            )

        logger.info(f"Generated {len(return_data)} reports")
        return [return_data]

    def _parse_data(self, data: Any, node_name: str, item_index: int) -> dict[str, Any]:
        """Parse the JSON template data of one record."""
        try:
            template_data = json.loads(data)
        except (TypeError, ValueError) as e:
            raise NodeOperationError(
                node_name,
                f"Something went wrong while parsing the template data. {e}",
                item_index=item_index,
            ) from e

        if not isinstance(template_data, dict):
            raise NodeOperationError(
                node_name,
                "Something went wrong while parsing the template data. "
                f"Expected a JSON object, got {type(template_data).__name__}",
                item_index=item_index,
            )
        return template_data

    def _get_delimiters(
        self, context: BaseExecutionContext, node_name: str, item_index: int
    ) -> TagDelimiters:
        """Read the delimiter collection, filling unset options with defaults."""
        raw = context.get_node_parameter("tagDelimiters", item_index, {}) or {}
        try:
            return TagDelimiters.model_validate(raw)
        except ValidationError as e:
            raise NodeOperationError(
                node_name,
                f"Invalid tag delimiters: {e.errors()[0]['msg']}",
                item_index=item_index,
            ) from e
