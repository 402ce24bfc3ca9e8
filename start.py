"""Server startup - prints the configuration summary and runs the API."""

import os
import sys
from pathlib import Path

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

sys.path.insert(0, str(Path(__file__).parent / "src"))

from utils.config import load_config, validate_config  # noqa: E402


def display_config(console: Console, config: dict) -> None:
    """Show which providers are configured and any configuration problems."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    def status(key: str, missing: str) -> str:
        return "[green]configured[/green]" if config.get(key) else missing

    table.add_row("Outline (Gemini)", status("gemini_api_key", "[red]missing[/red]"))
    table.add_row("Storyboard (Imagen)", status("imagen_api_key", "[red]missing[/red]"))
    table.add_row("Narration (ElevenLabs)", status("elevenlabs_api_key", "[yellow]browser TTS[/yellow]"))
    table.add_row("Story mode", config["story_mode"])
    table.add_row("Seconds per scene", str(config["seconds_per_scene"]))

    console.print(Panel(table, title="[bold]Story Wizard[/bold]", border_style="blue"))

    for problem in validate_config(config):
        console.print(f"[yellow]![/yellow] {problem}")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", "8000"))
    display_config(Console(), load_config())
    uvicorn.run("api.server:app", host="0.0.0.0", port=port, log_level="info")
