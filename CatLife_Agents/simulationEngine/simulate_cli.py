# simulate_cli.py
# Command line entry point: run a cat life-course simulation or list the registry breeds.
import os
import json
import random
import asyncio
import logging
import typing as t

import typer
from rich import print
from rich.table import Table
from rich.console import Console
from pydantic import ValidationError

#custom imports
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.simulationState import EnhancedSimulationResult
from CatLife_Agents.breedRegistry.breed_repo import find_breed_profile, list_breed_names, registry_fingerprint
from CatLife_Agents.simulationEngine.simulation import (
    END_AGE_MONTHS, SimulationInputError, run_enhanced_simulation, run_fully_enhanced_simulation,
)

app = typer.Typer(add_completion=False, help="CatLife life-course health simulator")

_STATUS_STYLE = {"thriving": "green", "ok": "cyan", "risky": "yellow", "unhealthy": "red"}
_SEVERITY_STYLE = {"info": "blue", "warning": "yellow", "critical": "bold red"}


@app.callback()
def main(log_level: str = typer.Option(os.getenv("CATLIFE_LOG_LEVEL", "INFO"), help="Logging level")):
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


def _print_result(result: EnhancedSimulationResult, console: Console) -> None:
    print(f"\n[bold]{result.summary}[/bold]")
    if result.breed_profile:
        print(f"[dim]Breed profile: {result.breed_profile.breed} ({result.breed_profile.size_category})[/dim]")

    if result.recommendations:
        print("\n[bold green]Recommendations[/bold green]")
        for r in result.recommendations:
            print(f"• {r}")

    if result.alerts:
        print("\n[bold yellow]Alerts[/bold yellow]")
        for a in result.alerts:
            style = _SEVERITY_STYLE.get(a.severity, "white")
            print(f"[{style}]{a.age_months // 12:>2}y {a.age_months % 12:>2}m {a.severity:<8}[/{style}] {a.message}")

    table = Table(title="Yearly milestones")
    table.add_column("Age", justify="right")
    table.add_column("Weight (kg)", justify="right")
    table.add_column("Status")
    table.add_column("Note")
    for p in result.enhanced_points:
        if p.age_months % 12:
            continue
        style = _STATUS_STYLE.get(p.health_status, "white")
        note = p.enhanced_note.personalized_note if p.enhanced_note else p.notes
        table.add_row(str(p.age_months // 12), f"{p.weight_kg_estimate:.2f}", f"[{style}]{p.health_status}[/{style}]", note)
    console.print(table)

    print(f"\n[dim]Trend: {result.trajectory.trend} · "
          f"year 10: {result.trajectory.projected_status_at_year10} · "
          f"year 15: {result.trajectory.projected_status_at_year15}[/dim]")


@app.command()
def simulate(
    name: t.Optional[str] = typer.Option(None, help="Cat's name"),
    age_years: t.Optional[int] = typer.Option(None, "--age-years", min=0, help="Age in whole years"),
    age_months: t.Optional[int] = typer.Option(None, "--age-months", min=0, max=11, help="Extra months"),
    breed: t.Optional[str] = typer.Option(None, help="Breed name or alias"),
    sex: t.Optional[str] = typer.Option(None, help="male|female|unknown"),
    neutered: t.Optional[bool] = typer.Option(None, "--neutered/--not-neutered"),
    indoor_outdoor: t.Optional[str] = typer.Option(None, "--lifestyle", help="indoor|outdoor|mixed"),
    weight_kg: t.Optional[float] = typer.Option(None, "--weight", help="Current weight in kg"),
    body_condition: t.Optional[str] = typer.Option(None, "--body-condition", help="underweight|ideal|overweight|unknown"),
    conditions: t.Optional[t.List[str]] = typer.Option(None, "--condition", help="Known condition (repeatable)"),
    food_type: t.Optional[str] = typer.Option(None, "--food-type", help="dry|wet|mixed|raw|other"),
    food_oz: t.Optional[float] = typer.Option(None, "--food-oz", help="Food per day in ounces"),
    meals: t.Optional[int] = typer.Option(None, help="Meals per day (1-4)"),
    treats: t.Optional[float] = typer.Option(None, help="Treats per day"),
    play: t.Optional[float] = typer.Option(None, help="Play minutes per day"),
    vet: t.Optional[float] = typer.Option(None, help="Vet visits per year"),
    litter: t.Optional[str] = typer.Option(None, help="daily|every_2_days|weekly|unknown"),
    seed: t.Optional[int] = typer.Option(None, help="Seed the weight noise for a reproducible run"),
    notes: bool = typer.Option(False, "--notes/--no-notes", help="Fetch personalized milestone notes"),
    json_out: t.Optional[str] = typer.Option(None, "--json", help="Write the result to JSON at this path ('-' for stdout)"),
):
    """Simulate a cat's health from its current age to 20 years."""
    try:
        profile = CatProfile(
            name=name, age_years=age_years, age_months=age_months, breed=breed, sex=sex, neutered=neutered,
            indoor_outdoor=indoor_outdoor, weight_kg=weight_kg, body_condition=body_condition,
            known_conditions=list(conditions or []),
        )
        routine = CareRoutine(
            food_type=food_type, food_amount_oz_per_day=food_oz, feeding_frequency=meals,
            treats_per_day=treats, play_minutes_per_day=play, vet_visits_per_year=vet,
            litter_cleaning_frequency=litter,
        )
    except ValidationError as e:
        print(f"[bold red]Invalid input:[/bold red] {e}")
        raise typer.Exit(code=2)

    if profile.total_age_months() > END_AGE_MONTHS:
        print("[bold red]Age is beyond the 20-year simulation window.[/bold red]")
        raise typer.Exit(code=2)

    rng = random.Random(seed) if seed is not None else None
    try:
        if notes:
            result = asyncio.run(run_fully_enhanced_simulation(profile, routine, rng=rng))
        else:
            result = run_enhanced_simulation(profile, routine, rng=rng)
    except SimulationInputError as e:
        print(f"[bold red]Invalid input:[/bold red] {e}")
        raise typer.Exit(code=2)

    if json_out == "-":
        typer.echo(result.model_dump_json(indent=2))
        return

    _print_result(result, Console())
    if json_out:
        with open(json_out, "w", encoding="utf-8") as f:
            json.dump(result.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        print(f"JSON written to {json_out}")


@app.command()
def breeds():
    """List the breeds in the health registry."""
    ref = registry_fingerprint()
    table = Table(title=f"{ref.registry_id} v{ref.version} ({ref.hash})")
    table.add_column("Breed")
    table.add_column("Size")
    table.add_column("Life expectancy", justify="right")
    table.add_column("Ideal weight (kg)", justify="right")
    for breed_name in list_breed_names():
        p = find_breed_profile(breed_name)
        table.add_row(
            p.breed,
            p.size_category,
            f"{p.life_expectancy.min:g}-{p.life_expectancy.max:g}y",
            f"{p.ideal_weight.min:g}-{p.ideal_weight.max:g}",
        )
    Console().print(table)


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        print("\nInterrupted.")
