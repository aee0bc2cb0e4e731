"""Command-line interface for the hauspreis model comparison."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

app = typer.Typer(
    name="hauspreis",
    help="Cross-validated comparison of regression models for house prices.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
]


@app.command()
def compare(
    config: ConfigOption,
    data: Annotated[
        Path | None,
        typer.Option(
            "--data",
            "-d",
            help="Path to the housing CSV. Overrides data.path from the config.",
        ),
    ] = None,
    method: Annotated[
        list[str] | None,
        typer.Option(
            "--method",
            "-m",
            help="Method to train (repeatable). Trains all enabled methods if not specified.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory for result tables. Default: output/{project}/results.",
        ),
    ] = None,
    plot: Annotated[
        bool,
        typer.Option("--plot/--no-plot", help="Save the comparison chart."),
    ] = True,
    details: Annotated[
        bool,
        typer.Option("--details", help="Print every method's results table."),
    ] = False,
    log_level: LogLevelOption = "INFO",
) -> None:
    """
    Cross-validate every enabled method and compare their errors.

    Prints the comparison table and writes it, together with each
    method's per-hyperparameter results, as CSV.
    """
    from hauspreis.config.loader import load_config
    from hauspreis.data.loader import load_housing_data
    from hauspreis.errors import HauspreisError
    from hauspreis.evaluation.comparison import run_comparison
    from hauspreis.evaluation.report import (
        plot_comparison,
        print_comparison,
        print_results,
        save_results,
    )
    from hauspreis.modeling.methods import list_methods
    from hauspreis.utils.logging import configure_logging

    configure_logging(log_level)

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        project_config = load_config(config)
    except (FileNotFoundError, HauspreisError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    if data is not None:
        project_config = project_config.model_copy(
            update={"data": project_config.data.model_copy(update={"path": data})}
        )

    if method:
        unknown = [m for m in method if m not in list_methods()]
        if unknown:
            console.print(
                f"[red]Error: Unknown method(s) {', '.join(unknown)}. "
                f"Available: {', '.join(list_methods())}[/red]"
            )
            raise typer.Exit(code=1)

    if output is None:
        output = project_config.results_dir

    console.print(f"[dim]Data: {project_config.data.path}[/dim]")
    console.print(
        f"[dim]Folds: {project_config.cv.folds} (seed {project_config.cv.seed})[/dim]"
    )

    try:
        housing = load_housing_data(project_config.data)
        result = run_comparison(housing, project_config, method or None)
    except (FileNotFoundError, HauspreisError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    if details:
        for model in result.models.values():
            print_results(model, console)
    print_comparison(result.table, console)
    console.print(f"\n[green]Best method: {result.best_method}[/green]")

    written = save_results(result, output)
    console.print(f"[green]Saved {len(written)} tables to: {output}[/green]")

    if plot:
        plot_path = plot_comparison(
            result.table, project_config.plots_dir / "comparison.png"
        )
        console.print(f"[green]Saved chart to: {plot_path}[/green]")


@app.command()
def explore(
    config: ConfigOption,
    top: Annotated[
        int,
        typer.Option("--top", "-n", help="Number of correlated pairs / VIF rows to show."),
    ] = 10,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Summarize columns, strongest correlations and variance inflation."""
    from hauspreis.config.loader import load_config
    from hauspreis.data.loader import load_housing_data
    from hauspreis.errors import HauspreisError
    from hauspreis.evaluation.exploration import (
        describe_features,
        top_correlations,
        variance_inflation,
    )
    from hauspreis.evaluation.report import print_table
    from hauspreis.utils.logging import configure_logging

    configure_logging(log_level)

    try:
        project_config = load_config(config)
        housing = load_housing_data(project_config.data)
    except (FileNotFoundError, HauspreisError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(
        f"[blue]{housing.n_rows} rows, {len(housing.numeric_features)} numeric and "
        f"{len(housing.categorical_features)} categorical features[/blue]"
    )
    print_table(describe_features(housing), "Columns", console)
    print_table(
        top_correlations(housing, n=top).set_index("a"),
        f"Top {top} correlated pairs",
        console,
    )
    print_table(
        variance_inflation(housing).head(top).set_index("feature"),
        "Variance inflation",
        console,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from hauspreis import __version__

    console.print(f"hauspreis version {__version__}")


if __name__ == "__main__":
    app()
