"""CLI entry point for Grocery Prices."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from . import __version__
from .export import export_summary
from .packages import PackageDescriptor
from .service import GroceryPrices
from .shopping import InvalidIngredientsError, ShoppingSummary, validate_ingredients

T = TypeVar("T")


def get_service() -> GroceryPrices:
    """Create the service from environment configuration."""
    return GroceryPrices.from_config()


def run(action: Callable[[GroceryPrices], Awaitable[T]]) -> T:
    """Run an async action against a fresh service, closing it afterwards."""

    async def _run() -> T:
        service = get_service()
        try:
            return await action(service)
        finally:
            await service.aclose()

    return asyncio.run(_run())


def load_recipe_file(path: str) -> dict[str, Any]:
    """
    Load a recipe JSON file.

    The file holds either a bare ingredient list or an object with
    'ingredients' and optional 'title' and 'servings'.

    Raises:
        InvalidIngredientsError: If the file isn't UTF-8 JSON or the
            ingredient list is invalid
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise InvalidIngredientsError(f"Invalid recipe file {path}: {e}") from e

    recipe = data if isinstance(data, dict) else {}
    return {
        "title": recipe.get("title") or Path(path).stem,
        "servings": recipe.get("servings"),
        "ingredients": validate_ingredients(data),
    }


def display_summary(summary: ShoppingSummary, servings: int | None = None) -> None:
    """Display a shopping summary as a table."""
    click.echo()
    click.echo("=" * 80)
    click.echo("SHOPPING LIST SUMMARY")
    click.echo("=" * 80)
    click.echo(f"Total Shopping Cost: ${summary.total_package_price:.2f}")
    click.echo(f"Cost Used in Recipe: ${summary.total_recipe_cost:.2f}")
    click.echo(f"Leftover Ingredients Value: ${summary.leftover_value:.2f}")
    if servings:
        click.echo(f"Cost Per Serving: ${summary.total_recipe_cost / servings:.2f}")

    click.echo()
    click.echo(
        "Ingredient".ljust(20)
        + "Package Size".ljust(15)
        + "Package Price".ljust(15)
        + "Amount Used".ljust(15)
        + "Cost in Recipe"
    )
    click.echo("-" * 80)
    for line in summary.ingredients:
        click.echo(
            line.name[:19].ljust(20)
            + line.package_size.ljust(15)
            + f"${line.package_price:.2f}".ljust(15)
            + f"{line.percent_used * 100:.0f}%".ljust(15)
            + f"${line.cost_in_recipe:.2f}"
        )
    click.echo("-" * 80)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(version=__version__, prog_name="grocery-prices")
@click.option("--verbose", "-v", is_flag=True, help="Show diagnostic logging")
def cli(verbose: bool):
    """Grocery Prices - estimate what a recipe costs to shop for.

    Ingredients are priced by the retail packages you'd have to buy,
    not just the exact amounts the recipe uses.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


# ============================================================================
# Price Commands
# ============================================================================


@cli.command()
@click.argument("name")
def price(name: str):
    """Show the unit price for an ingredient."""
    result = run(lambda service: service.get_ingredient_price(name))

    if not result.price:
        click.echo(f"✗ No price data found for ingredient: {name}", err=True)
        raise SystemExit(1)

    click.echo(f"{name}: ${result.price:.2f} per {result.unit} ({result.source})")


@cli.command()
@click.argument("name")
@click.argument("quantity")
def calculate(name: str, quantity: str):
    """Calculate the cost of an exact ingredient quantity.

    Examples:

    \b
        grocery-prices calculate "chicken breast" 500g
        grocery-prices calculate "olive oil" "2 tbsp"
    """
    ingredient = {"name": name, "quantity": quantity}
    echo_json(run(lambda service: service.calculate_ingredient_cost(ingredient)).to_dict())


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
def recipe(file_path: str):
    """Calculate exact-quantity costs for a recipe JSON file."""
    try:
        data = load_recipe_file(file_path)
    except InvalidIngredientsError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    echo_json(run(lambda service: service.calculate_recipe_cost(data["ingredients"])).to_dict())


@cli.command("recipe-breakdown")
@click.argument("recipe_id")
def recipe_breakdown(recipe_id: str):
    """Show Spoonacular's price breakdown for a recipe ID."""
    breakdown = run(lambda service: service.get_recipe_price_breakdown(recipe_id))

    if not breakdown:
        click.echo(f"✗ No price data found for recipe ID: {recipe_id}", err=True)
        raise SystemExit(1)

    echo_json(breakdown)


# ============================================================================
# Package Commands
# ============================================================================


@cli.command("shopping-cost")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.option("--output", "-o", type=click.Path(), help="Export the summary (.json or .md)")
def shopping_cost(file_path: str, as_json: bool, output: str | None):
    """Calculate what a recipe costs to shop for, package by package.

    FILE_PATH is a JSON file with a list of {"name", "quantity"} ingredients,
    or an object with "ingredients" and optional "title" and "servings".
    """
    try:
        data = load_recipe_file(file_path)
    except InvalidIngredientsError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    summary = run(lambda service: service.compute_shopping_cost(data["ingredients"]))
    servings = data["servings"] if isinstance(data["servings"], int) else None

    if as_json:
        echo_json(summary.to_dict())
    else:
        click.echo(f"Recipe: {data['title']}")
        display_summary(summary, servings)

    if output:
        fmt = export_summary(summary, output, recipe_title=data["title"], servings=servings)
        click.echo(f"✓ Exported {fmt} to {output}")


@cli.command("package-sizes")
def package_sizes():
    """List all known package sizes (built-in and cached)."""

    async def _list(service: GroceryPrices) -> dict[str, PackageDescriptor]:
        return service.list_known_packages()

    packages = run(_list)

    for name in sorted(packages):
        package = packages[name]
        click.echo(f"{name.ljust(25)}{package.size.ljust(12)}${package.price:.2f}  ({package.source})")


@cli.command("package-info")
@click.argument("name")
def package_info(name: str):
    """Show the package size and price used for an ingredient."""
    echo_json(run(lambda service: service.resolve_package(name)).to_dict())


@cli.command("cache-clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def cache_clear(yes: bool):
    """Clear cached package sizes and prices."""
    if not yes and not click.confirm("Clear all cached package sizes and prices?"):
        click.echo("Cancelled")
        return

    async def _clear(service: GroceryPrices) -> None:
        service.clear_caches()

    run(_clear)
    click.echo("✓ Caches cleared")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
