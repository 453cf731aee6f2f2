"""Render a report from the command line.

Runs the Generate Report node once over a template file and a JSON
data file, and writes the generated document.

Usage:
    python -m scripts.render_report template.docx data.json out.docx
    python scripts/render_report.py template.docx data.json out.docx --tag-start "[[" --tag-end "]]"
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from report_generator.core.config import get_settings
from report_generator.core.logging_config import setup_logging
from report_generator.interfaces.node import NodeExecutionData, NodeOperationError
from report_generator.nodes import GenerateReportNode
from report_generator.runtime import LocalExecutionContext, make_binary_data
from report_generator.strategies.template_engine import DocxTemplateRenderer


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a DOCX template with JSON data.")
    parser.add_argument("template", type=Path, help="Path to the .docx template")
    parser.add_argument("data", type=Path, help="Path to the JSON data file")
    parser.add_argument("output", type=Path, help="Where to write the generated .docx")
    parser.add_argument("--tag-start", default="{{")
    parser.add_argument("--tag-end", default="}}")
    parser.add_argument("--container-open", default="#")
    parser.add_argument("--container-close", default="/")
    parser.add_argument(
        "--strict", action="store_true", help="Fail on tags missing from the data"
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Render one report and write it to disk."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    renderer = DocxTemplateRenderer(
        strict=args.strict or settings.strict_tags,
        autoescape=settings.autoescape,
    )
    node = GenerateReportNode(renderer=renderer)

    template = make_binary_data(args.template.read_bytes(), args.template.name)
    context = LocalExecutionContext(
        node,
        items=[NodeExecutionData(binary={"template": template})],
        parameters={
            "sourceKey": "template",
            "destinationKey": "report",
            "data": args.data.read_text(encoding="utf-8"),
            "outputFileName": args.output.stem,
            "tagDelimiters": {
                "tagStart": args.tag_start,
                "tagEnd": args.tag_end,
                "containerTagOpen": args.container_open,
                "containerTagClose": args.container_close,
            },
        },
    )

    try:
        outputs = await node.execute(context)
    except NodeOperationError as e:
        print(f"Report generation failed: {e}", file=sys.stderr)
        return 1

    report = outputs[0][0].binary["report"]
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(report.data)
    print(f"Report written to {args.output} ({report.file_size} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
