# cli.py
import asyncio
import logging

import click

from file_broker.adapters.file_store import FileStoreFactory
from file_broker.file_sources import add_file_source
from file_broker.orchestrators import FileRequestBroker
from file_broker.schemas import FetchType, FileRecord, Frequency, MessageKind, NotebookInfo
from file_broker.settings import get_settings
from file_broker.state import NotebookStore

# Configure logging
logger = logging.getLogger(__name__)


async def _open_notebook(notebook_id):
    settings = get_settings()
    file_store = FileStoreFactory.get_file_store(notebook_id, settings)
    files = [FileRecord(**f) for f in await file_store.list_files()]
    store = NotebookStore(NotebookInfo(notebook_id=notebook_id or settings.notebook_id, files=files))
    return file_store, store


def _run_request(operation, notebook_id, filename, options):
    """Run one file request through the broker and print what it reported."""
    outcomes = []

    async def run():
        file_store, store = await _open_notebook(notebook_id)
        broker = FileRequestBroker(file_store, store.get_state, store.dispatch)
        request = getattr(broker, operation)
        await request(filename, "cli-request", options, lambda kind, body: outcomes.append((kind, body)))

    asyncio.run(run())

    kind, body = outcomes[0]
    if kind == MessageKind.SUCCESS.value:
        response = body["response"]
        if isinstance(response, bytes):
            click.echo(f"✅ {operation}: {filename} ({len(response)} bytes)")
        elif response is not None:
            click.echo(response)
        else:
            click.echo(f"✅ {operation}: {filename}")
    else:
        click.echo(f"❌ {operation}: {body['reason']}", err=True)
        raise SystemExit(1)


@click.group()
@click.option("--log-level", default=None, help="Override the configured logging level")
def cli(log_level):
    """CLI commands for running notebook file requests"""
    logging.basicConfig(level=log_level or get_settings().log_level)


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Deployment Mode: {settings.deployment_mode}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  Storage Dir: {settings.storage_dir}")
    print(f"  File Index: {settings.index_db_path}")
    print(f"  Notebook: {settings.notebook_id}")


@cli.command()
@click.argument("filename")
@click.option("--notebook", default=None, help="Notebook id (defaults to the configured one)")
@click.option("--fetch-type",
              type=click.Choice([t.value for t in FetchType]),
              default=FetchType.TEXT.value,
              help="Return content as text or bytes")
def load(filename, notebook, fetch_type):
    """Load a file from the store"""
    _run_request("load_file", notebook, filename, {"fetchType": fetch_type})


@cli.command()
@click.argument("filename")
@click.argument("source", type=click.File("rb"))
@click.option("--notebook", default=None, help="Notebook id (defaults to the configured one)")
@click.option("--overwrite", is_flag=True, help="Replace the file if it already exists")
def save(filename, source, notebook, overwrite):
    """Save the contents of SOURCE as FILENAME"""
    _run_request("save_file", notebook, filename, {"overwrite": overwrite, "data": source.read()})


@cli.command()
@click.argument("filename")
@click.option("--notebook", default=None, help="Notebook id (defaults to the configured one)")
def delete(filename, notebook):
    """Delete a file from the store"""
    _run_request("delete_file", notebook, filename, None)


@cli.command()
@click.argument("source_url")
@click.argument("destination_filename")
@click.option("--notebook", default=None, help="Notebook id (defaults to the configured one)")
@click.option("--frequency",
              type=click.Choice([f.value for f in Frequency]),
              default=Frequency.NEVER.value,
              help="How often the source is fetched")
def add_source(source_url, destination_filename, notebook, frequency):
    """Register SOURCE_URL to be fetched into DESTINATION_FILENAME"""
    async def run():
        file_store, store = await _open_notebook(notebook)
        return await add_file_source(
            file_store, store.get_state, store.dispatch, source_url, destination_filename, frequency
        )

    response = asyncio.run(run())
    click.echo(f"✅ File source {response['id']} registered for {destination_filename}")


if __name__ == "__main__":
    cli()
