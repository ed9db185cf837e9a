"""Shopping summary export in various formats."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .shopping import ShoppingSummary


def export_to_json(
    summary: ShoppingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
    servings: int | None = None,
) -> None:
    """
    Export a shopping summary to JSON format.

    Args:
        summary: Calculated shopping summary
        filepath: Output file path
        recipe_title: Optional recipe title
        servings: Optional number of servings, adds a cost per serving
    """
    data: dict[str, Any] = {
        "exported_at": datetime.now().isoformat(),
        "recipe_title": recipe_title,
        **summary.to_dict(),
    }
    if servings:
        data["costPerServing"] = round(summary.total_recipe_cost / servings, 2)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_to_markdown(
    summary: ShoppingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
    servings: int | None = None,
) -> None:
    """
    Export a shopping summary to Markdown format.

    Args:
        summary: Calculated shopping summary
        filepath: Output file path
        recipe_title: Optional recipe title
        servings: Optional number of servings, adds a cost per serving
    """
    lines: list[str] = []

    # Header
    title = recipe_title or "Shopping List"
    lines.append(f"# {title}")
    lines.append("")
    lines.append(f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
    lines.append("")

    # Summary
    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Total Shopping Cost:** ${summary.total_package_price:.2f}")
    lines.append(f"- **Cost Used in Recipe:** ${summary.total_recipe_cost:.2f}")
    lines.append(f"- **Leftover Ingredients Value:** ${summary.leftover_value:.2f}")
    if servings:
        lines.append(f"- **Cost Per Serving:** ${summary.total_recipe_cost / servings:.2f}")
    lines.append("")

    # Shopping list
    lines.append("## Items")
    lines.append("")
    lines.append("| Ingredient | Quantity | Package | Package Price | Used | Cost in Recipe | Source |")
    lines.append("|---|---|---|---|---|---|---|")
    for line in summary.ingredients:
        lines.append(
            f"| {line.name} | {line.quantity} | {line.package_size} "
            f"| ${line.package_price:.2f} | {line.percent_used * 100:.0f}% "
            f"| ${line.cost_in_recipe:.2f} | {line.source} |"
        )
    lines.append("")

    with open(filepath, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def export_summary(
    summary: ShoppingSummary,
    filepath: str | Path,
    *,
    recipe_title: str | None = None,
    servings: int | None = None,
    format: str | None = None,
) -> str:
    """
    Export a shopping summary to file.

    Format is auto-detected from file extension if not specified.

    Returns:
        The format used for export
    """
    path = Path(filepath)

    # Auto-detect format from extension
    if format is None:
        ext = path.suffix.lower()
        format_map = {
            ".json": "json",
            ".md": "md",
            ".markdown": "md",
        }
        format = format_map.get(ext, "md")

    if format == "json":
        export_to_json(summary, filepath, recipe_title=recipe_title, servings=servings)
    elif format in ("md", "markdown"):
        export_to_markdown(summary, filepath, recipe_title=recipe_title, servings=servings)
    else:
        raise ValueError(f"Unsupported format: {format}")

    return format
