import json
import mimetypes
from pathlib import Path

import typer

app = typer.Typer(help="pixeltag: upload → describe → tag")


def _analyzer():
    from worker.app.config import settings
    from worker.app.services.vision_openai import VisionAnalyzer

    if not settings.OPENAI_API_KEY:
        typer.echo("OPENAI_API_KEY is not configured", err=True)
        raise typer.Exit(code=1)
    return VisionAnalyzer.from_settings(settings)


@app.command()
def version():
    """Show version."""
    import importlib.metadata as md

    print(md.version("pixeltag"))


@app.command()
def analyze(path: Path = typer.Argument(..., exists=True, dir_okay=False)):
    """Describe and tag a local image, printing the JSON result."""
    from worker.app.config import settings
    from worker.app.errors import AnalyzeError

    mime = mimetypes.guess_type(path.name)[0] or ""
    if not mime.startswith("image/"):
        typer.echo(f"not an image: {path}", err=True)
        raise typer.Exit(code=1)
    if path.stat().st_size > settings.MAX_UPLOAD_BYTES:
        typer.echo("File size is too large. Max size is 5MB.", err=True)
        raise typer.Exit(code=1)

    try:
        result = _analyzer().analyze(path.read_bytes(), mime)
    except AnalyzeError as e:
        typer.echo(f"{type(e).__name__}: {e.public_message}", err=True)
        raise typer.Exit(code=1)
    print(json.dumps(result.model_dump(), ensure_ascii=False, indent=2))


@app.command()
def probe():
    """Check that the configured API key is accepted."""
    if not _analyzer().probe():
        typer.echo("OpenAI connection test failed", err=True)
        raise typer.Exit(code=1)
    print("ok")


@app.command()
def serve(host: str = typer.Option(None), port: int = typer.Option(None)):
    """Run the HTTP worker."""
    import uvicorn
    from worker.app.config import settings

    uvicorn.run(
        "worker.app.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
    )


if __name__ == "__main__":
    app()
