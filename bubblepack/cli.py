import logging
from pathlib import Path
from typing import List, Optional

import typer

from bubblepack.chart import Chart
from bubblepack.config import AllocatorConfig, PackingConfig
from bubblepack.errors import BubblePackError
from bubblepack.logging_config import setup_logging
from bubblepack.scenarios import Scenario, scenario_ratios
from bubblepack.strategy import LayoutStrategy

app = typer.Typer(add_completion=False, help="Pack weighted circles into a rectangle.")


@app.command()
def main(
    ratio: Optional[List[float]] = typer.Option(None, "--ratio", "-r", help="Ratio of one circle, repeatable."),
    scenario: Optional[Scenario] = typer.Option(None, help="Pack one of the preset ratio sets instead."),
    strategy: LayoutStrategy = LayoutStrategy.force,
    width: float = 500.0,
    height: float = 500.0,
    min_radius: float = 0.0,
    seed: Optional[int] = None,
    output: Optional[Path] = typer.Option(None, help="Write the circle table to this csv file."),
    verbose: bool = False,
    debug: bool = False,
):
    if debug:
        setup_logging(logging.DEBUG)
    elif verbose:
        setup_logging(logging.INFO)

    if scenario is not None:
        ratios = scenario_ratios(scenario, random_state=seed)
    elif ratio:
        ratios = list(ratio)
    else:
        raise typer.BadParameter("Provide at least one --ratio or a --scenario.")

    try:
        chart = Chart(
            width,
            height,
            config=PackingConfig(allocator=AllocatorConfig(min_radius=min_radius)),
            random_state=seed,
        )
        for value in ratios:
            chart.add_circle(value)
        result = chart.run_layout(strategy, verbose=verbose)
    except (BubblePackError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    frame = result.to_frame()
    typer.echo(frame.to_string(index=False))
    typer.echo()
    typer.echo(result.summary().to_string())

    if output is not None:
        frame.to_csv(output, index=False)
        typer.echo(f"Saved circles to {output}.")


def run():
    app()


if __name__ == "__main__":
    run()
