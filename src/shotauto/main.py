import typer
from rich.console import Console
from rich.table import Table

from shotauto.features.config.models import RECOGNIZED_KEYS
from shotauto.features.jobs.models import InvalidTransitionError, JobNotFoundError, JobStatus
from shotauto.features.trends.models import Trend
from shotauto.platform.logging_config import configure_logging
from shotauto.platform.store import ShotStore, StoreError, open_default_store

app = typer.Typer(help="Inspect and drive the ShotAuto job queue.")
console = Console()

_db_path: str | None = None


@app.callback()
def main(
    db: str = typer.Option(None, "--db", help="Database file (defaults to $SHOTAUTO_DB or the data dir)"),
):
    """Configure logging and remember which database to open."""
    global _db_path
    configure_logging()
    _db_path = db


def _open_store() -> ShotStore:
    try:
        return ShotStore(_db_path) if _db_path else open_default_store()
    except StoreError as e:
        _fail(str(e))


def _fail(message: str):
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


def _job_table(title: str, job, trend) -> Table:
    table = Table(title=title)
    table.add_column("Field", style="dim")
    table.add_column("Value", style="cyan")
    for key, value in job.model_dump(mode="json").items():
        table.add_row(f"job.{key}", "" if value is None else str(value))
    for key, value in trend.model_dump(mode="json").items():
        table.add_row(f"trend.{key}", "" if value is None else str(value))
    return table


@app.command()
def init():
    """Create the database and its tables if missing."""
    with _open_store() as store:
        console.print(f"[green]Database ready at {store.path}[/green]")


@app.command("config-show")
def config_show():
    """Show the persisted configuration (secrets masked)."""
    with _open_store() as store:
        try:
            config = store.load_config()
        except StoreError as e:
            _fail(str(e))

    table = Table(title="Configuration")
    table.add_column("Key", style="magenta")
    table.add_column("Value", style="cyan")
    for key, value in config.model_dump().items():
        if value is None:
            shown = "[dim]unset[/dim]"
        elif key in ("youtube_api_key", "telegram_bot_token"):
            shown = "•" * 8
        else:
            shown = str(value)
        table.add_row(key, shown)
    console.print(table)


@app.command("config-set")
def config_set(key: str, value: str):
    """Set one configuration key."""
    if key not in RECOGNIZED_KEYS:
        _fail(f"Unknown key {key!r}. Known keys: {', '.join(RECOGNIZED_KEYS)}")
    with _open_store() as store:
        try:
            store.set_config(key, value)
        except StoreError as e:
            _fail(str(e))
    console.print(f"[green]{key} saved.[/green]")


@app.command("add-trend")
def add_trend(
    video_id: str,
    title: str,
    channel: str = typer.Option(None, "--channel", "-c", help="Channel name"),
    views: int = typer.Option(None, "--views", help="View count"),
    category: str = typer.Option(None, "--category", help="Category"),
):
    """Register a trend (ignored if the video is already known)."""
    trend = Trend(video_id=video_id, title=title, channel=channel, views=views, category=category)
    with _open_store() as store:
        try:
            trend_id = store.insert_trend(trend)
        except StoreError as e:
            _fail(str(e))
    if trend_id:
        console.print(f"[green]Trend {video_id} stored as #{trend_id}.[/green]")
    else:
        console.print(f"[yellow]Trend {video_id} already known, left unchanged.[/yellow]")


@app.command("create-job")
def create_job(
    video_id: str,
    priority: int = typer.Option(0, "--priority", "-p", help="Higher runs first"),
):
    """Queue a job for a known trend."""
    with _open_store() as store:
        try:
            trend = store.get_trend_by_video_id(video_id)
            if trend is None:
                _fail(f"No trend with video id {video_id!r}.")
            job_id = store.create_job(trend.id, priority)
        except StoreError as e:
            _fail(str(e))
    console.print(f"[green]Job #{job_id} queued for {video_id}.[/green]")


@app.command("next")
def next_job():
    """Peek at the next pending job without claiming it."""
    with _open_store() as store:
        try:
            result = store.get_next_pending_job()
        except StoreError as e:
            _fail(str(e))
    if result is None:
        console.print("[yellow]Queue is empty.[/yellow]")
        return
    console.print(_job_table("Next pending job", *result))


@app.command()
def claim(
    status: JobStatus = typer.Option(JobStatus.GENERATING, "--status", "-s", help="In-progress state to claim into"),
):
    """Atomically take the next pending job."""
    with _open_store() as store:
        try:
            result = store.claim_next_pending_job(status)
        except (StoreError, ValueError) as e:
            _fail(str(e))
    if result is None:
        console.print("[yellow]Queue is empty.[/yellow]")
        return
    console.print(_job_table("Claimed job", *result))


@app.command("set-status")
def set_status(
    job_id: int,
    status: JobStatus,
    error: str = typer.Option(None, "--error", "-e", help="Error message for terminal states"),
    strict: bool = typer.Option(False, "--strict", help="Reject transitions the lifecycle does not allow"),
):
    """Move a job to a new status."""
    with _open_store() as store:
        try:
            store.update_job_status(job_id, status, error, validate=strict)
        except (StoreError, InvalidTransitionError, JobNotFoundError) as e:
            _fail(str(e))
    console.print(f"[green]Job #{job_id} is now {status.value}.[/green]")


@app.command()
def retry(job_id: int):
    """Return a failed job to the queue."""
    with _open_store() as store:
        try:
            job = store.retry_job(job_id)
        except (StoreError, InvalidTransitionError, JobNotFoundError) as e:
            _fail(str(e))
    console.print(f"[green]Job #{job_id} re-queued (retry {job.retry_count}).[/green]")


@app.command()
def stats():
    """Show dashboard counts."""
    with _open_store() as store:
        try:
            snapshot = store.get_stats()
        except StoreError as e:
            _fail(str(e))

    table = Table(title="Dashboard")
    table.add_column("Metric", style="magenta")
    table.add_column("Count", style="cyan", justify="right")
    for key, value in snapshot.model_dump().items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


if __name__ == "__main__":
    app()
