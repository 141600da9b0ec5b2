# manage.py

from dotenv import load_dotenv
load_dotenv()

import asyncio
import typer
import uvicorn
from typing_extensions import Annotated

# CLI untuk project FastAPI, pengganti manage.py di Flask.
cli = typer.Typer(
    help="Manajemen CLI untuk Tally Dashboard."
)

# --- Database Commands ---

@cli.command()
def init_db():
    """
    Inisialisasi database dan membuat semua tabel.
    """
    # Import di dalam fungsi agar tidak dieksekusi saat startup
    from tally_dashboard.database import Base, async_engine
    from tally_dashboard import models  # noqa: F401  register semua tabel

    async def create_tables():
        async with async_engine.begin() as conn:
            typer.echo("Membuat semua tabel sesuai models...")
            await conn.run_sync(Base.metadata.create_all)
        typer.secho("✅ Database berhasil diinisialisasi.", fg=typer.colors.GREEN)

    asyncio.run(create_tables())

# --- User Management Commands ---

@cli.command()
def create_admin(
    username: Annotated[str, typer.Argument(help="Username untuk admin baru.")],
    email: Annotated[str, typer.Argument(help="Email untuk admin baru (harus unik).")],
    password: Annotated[str, typer.Argument(help="Password untuk admin baru.")]
):
    """
    Membuat user baru dengan role 'admin'.
    """
    from pydantic import ValidationError as SchemaValidationError
    from tally_dashboard.database import AsyncSessionLocal
    from tally_dashboard.services.auth.user_service import UserService
    from tally_dashboard.services.exceptions import DashboardException

    async def add_admin_user():
        typer.echo(f"Mencoba membuat admin '{username}'...")
        async with AsyncSessionLocal() as session:
            try:
                user = await UserService(session).create_user({
                    'username': username,
                    'email': email,
                    'password': password,
                    'role': 'admin',
                    'is_active': True,
                })
                typer.secho(f"✅ Admin '{user['username']}' berhasil dibuat!", fg=typer.colors.GREEN)
            except (DashboardException, SchemaValidationError) as e:
                typer.secho(f"🔥 Gagal membuat admin: {e}", fg=typer.colors.RED)
                raise typer.Exit(code=1)

    asyncio.run(add_admin_user())

# --- Tally Commands ---

def _tally_service():
    from tally_dashboard.config import settings
    from tally_dashboard.database import AsyncSessionLocal
    from tally_dashboard.services import TallyService
    return TallyService.from_config(settings.tally_config(), AsyncSessionLocal)


@cli.command()
def test_connection():
    """
    Cek apakah Tally listener bisa dihubungi dan sales ledger tersedia.
    """
    async def probe(tally):
        result = await tally.check_connection()
        if not result['connected']:
            typer.secho(f"🔥 [{result['errorCode']}] {result['message']}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(f"✅ {result['message']}", fg=typer.colors.GREEN)

        account = tally.builder.sales_account
        if await tally.ensure_sales_ledger():
            typer.echo(f"Sales ledger '{account}' tersedia di Tally.")
        else:
            typer.secho(f"⚠️  Sales ledger '{account}' tidak bisa dibuat di Tally.", fg=typer.colors.YELLOW)

    tally = _tally_service()
    try:
        asyncio.run(probe(tally))
    finally:
        tally.close()


@cli.command()
def sync_ledgers():
    """
    Pull semua ledger dari Tally ke database lokal (sync type 'manual').
    """
    from tally_dashboard.database import AsyncSessionLocal
    from tally_dashboard.services import LedgerService

    async def pull(tally):
        async with AsyncSessionLocal() as session:
            result = await LedgerService(session, tally).sync_ledgers_to_database()
        color = typer.colors.GREEN if result['success'] else typer.colors.RED
        typer.secho(result['message'], fg=color)
        if not result['success']:
            raise typer.Exit(code=1)

    tally = _tally_service()
    try:
        asyncio.run(pull(tally))
    finally:
        tally.close()

# --- Server Commands ---

@cli.command()
def run(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = True
):
    """
    Menjalankan development server Uvicorn.
    """
    typer.echo(f"🚀 Menjalankan server di http://{host}:{port}")
    uvicorn.run("main:app", host=host, port=port, reload=reload, factory=True)


if __name__ == "__main__":
    cli()
