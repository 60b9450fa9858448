import functools

import rich_click as click
from pydantic import SecretStr
from rich.console import Console
from rich.table import Table
from yaspin import yaspin

import oreally.api.exceptions
from oreally import __version__
from oreally.api import OreallyClient
from oreally.api.enums import FETCH_RUNNER_VALUES
from oreally.utils import parse_url, seralize_runner

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

console = Console()

base_client = OreallyClient()


def create_option_group(options):
    return [
        options,
        {
            "name": "Advanced Options",
            "options": [
                "--db-path",
            ],
        },
        {
            "name": "Debug Options",
            "options": [
                "--debug",
            ],
        },
    ]


DOWNLOAD_OPTIONS = {
    "name": ":lock: Download Options",
    "options": [
        "--auth",
        "--folder",
        "--runner",
    ],
    "panel_styles": {
        "border_style": "yellow",
    },
}

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.OPTION_GROUPS = {
    "oreally add": create_option_group({"name": "Queue Options", "options": ["--url"]}),
    "oreally run": create_option_group(DOWNLOAD_OPTIONS),
    "oreally download": create_option_group(
        {**DOWNLOAD_OPTIONS, "options": ["--url", *DOWNLOAD_OPTIONS["options"]]},
    ),
    "oreally config": create_option_group({"name": "Config Options", "options": ["--auth", "--folder"]}),
}


def report_error(client, e, fallback_message):
    is_oreally_exception = isinstance(e, oreally.api.exceptions.OreallyException)
    message = e.args[0] if is_oreally_exception else fallback_message
    click.secho(message, fg="red", color=True, bold=True)
    client._debug_error(e)


def client_command(func=None, *, name=None):
    if func is None:
        return functools.partial(client_command, name=name)

    @cli.command(name=name)
    @click.pass_context
    @click.option(
        "--db-path",
        "db_path",
        type=click.Path(dir_okay=False, writable=True),
        default=str(base_client.storage.db_path),
        show_default=True,
        help="Path to the queue database",
    )
    @click.option(
        "--debug/--no-debug",
        "debug",
        default=base_client.DEBUG,
        show_default=True,
        help="Enable debug mode",
    )
    @functools.wraps(func)
    def wrapper(ctx, **kwargs):
        client = OreallyClient(
            DB_PATH=kwargs.pop("db_path"),
            DEBUG=kwargs.pop("debug"),
        )

        try:
            return func(ctx, client, **kwargs)
        except (click.ClickException, click.Abort):
            raise
        except Exception as e:
            report_error(client, e, "An error occurred")
            ctx.exit(1)

    return wrapper


def download_options(func):
    @click.option(
        "--auth",
        "auth",
        type=str,
        default=None,
        help="Credential for the login container. Defaults to OREALLY_AUTH",
    )
    @click.option(
        "--folder",
        "folder",
        type=click.Path(file_okay=False),
        default=None,
        help="Folder to save books in. Defaults to OREALLY_FOLDER, then ~",
    )
    @click.option(
        "--runner",
        "runner",
        type=click.Choice(FETCH_RUNNER_VALUES),
        default=None,
        help=f"Program that runs the downloads. Defaults to {base_client.RUNNER.value}",
    )
    @functools.wraps(func)
    def wrapper(ctx, client, **kwargs):
        runner = seralize_runner(kwargs.pop("runner"))
        if runner is not None:
            client.RUNNER = runner
        return func(ctx, client, **kwargs)

    return wrapper


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, prog_name="oreally")
@click.pass_context
def cli(ctx):
    """
    Queue and download books from your online library
    """
    ctx.ensure_object(dict)
    return


@client_command
def init(ctx, client):
    """
    Initialize the download queue
    """
    client.queue.init()
    click.secho(f"Initialized queue at {client.storage.db_path}", fg="green", color=True)


@client_command
@click.option(
    "--yes",
    "yes",
    is_flag=True,
    default=False,
    help="Do not ask for confirmation",
)
def reset(ctx, client, yes):
    """
    Remove every book from the download queue
    """
    if not yes and not click.confirm("Remove every queued book?"):
        return

    client.queue.reset()
    click.secho("Queue is empty", fg="green", color=True)


@client_command
@click.option(
    "--url",
    "url",
    type=str,
    required=True,
    help="Library view URL of the book",
)
def add(ctx, client, url):
    """
    Add a book to the download queue
    """
    book = client.queue.add(url)
    click.secho(f"Queued book {book.id}: {book.url}", fg="green", color=True)


@client_command(name="list")
def list_books(ctx, client):
    """
    Show the books waiting in the download queue
    """
    books = client.queue.list()

    table = Table(
        title="Queue",
        title_justify="left",
        title_style="bold",
        show_lines=False,
        show_edge=True,
        expand=True,
        pad_edge=True,
    )
    table.add_column("ID", no_wrap=True)
    table.add_column("Book ID", no_wrap=True)
    table.add_column("Title", no_wrap=True)
    table.add_column("URL", overflow="fold")

    for book in books:
        try:
            title, book_id = parse_url(book.url)
        except oreally.api.exceptions.InvalidUrl:
            title, book_id = "", ""
        table.add_row(str(book.id), book_id, title, book.url)

    console.print(table)
    if not books:
        click.echo("No books in the queue")


@client_command
@download_options
def run(ctx, client, auth, folder):
    """
    Download queued books until stopped
    """
    click.secho("oreally", bold=True, color=True)
    click.secho("Press Ctrl+C to stop \n", color=True)

    try:
        summary = client.queue.run(auth=auth, folder=folder)
    except KeyboardInterrupt:
        click.secho("\nStopped", bold=True, color=True)
        return

    click.secho(f"Downloaded {summary.dispatched} books", bold=True, fg="green", color=True)


@client_command
@click.option(
    "--url",
    "url",
    type=str,
    required=True,
    help="Library view URL of the book",
)
@download_options
def download(ctx, client, url, auth, folder):
    """
    Download a single book right away
    """
    request = client.books.resolve(url, auth=auth, folder=folder)

    with yaspin(text=f"Downloading {request.title}\r", color="yellow") as spinner:
        try:
            client.books.fetch(request)
            spinner.color = "green"
            spinner.text = f"Downloaded {request.title} to {request.get_output_filepath()}"
            spinner.ok("✔")
        except Exception:
            spinner.color = "red"
            spinner.text = f"Failed to download {request.title}"
            spinner.fail("✘")
            raise


@client_command
@click.option(
    "--auth",
    "auth",
    type=str,
    default=None,
    help="Default credential for the login container",
)
@click.option(
    "--folder",
    "folder",
    type=click.Path(file_okay=False),
    default=None,
    help="Default folder to save books in",
)
def config(ctx, client, auth, folder):
    """
    Save default credential and folder
    """
    if not auth and not folder:
        click.secho("Nothing to save, pass --auth and/or --folder", fg="yellow", color=True)
        return

    env_path = client.write_config(auth=auth, folder=folder)
    click.secho(f"Saved config to {env_path}", fg="green", color=True)
    if auth:
        click.secho(f"Credential: {SecretStr(auth)}", color=True)
    if folder:
        click.secho(f"Folder: {folder}", color=True)


def main():
    cli()


if __name__ == "__main__":
    main()
