"""CLI commands for a Pastec server."""
import functools
import logging

import click
import requests

from pastec.services.pastec_service import PastecClient
from pastec.utils.config_loader import load_config, get_config, reset_config
from pastec.utils.image_utils import read_image
from pastec.exceptions import PastecError


def handle_errors(func):
    """Report server and connection errors instead of a traceback."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PastecError as e:
            click.echo(f"Error: {e}", err=True)
        except requests.exceptions.ConnectionError:
            client = click.get_current_context().obj
            click.echo(f"Error: cannot reach server at {client.host}", err=True)
        except requests.exceptions.Timeout:
            click.echo("Error: request timed out", err=True)
        click.get_current_context().exit(1)
    return wrapper


def _read_image_arg(path: str, convert: bool) -> bytes:
    files = get_config()["files"]
    return read_image(
        path, convert=convert, max_dim=files["max_dim"], quality=files["jpeg_quality"]
    )


def _echo_image_id(action: str, image_id: int | None) -> None:
    if image_id is None:
        click.echo(f"{action} (server did not echo the image id).")
    else:
        click.echo(f"{action}: {image_id}")


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="Config file (default: config/config.yaml)")
@click.option("--host", default=None, help="Server host")
@click.option("--port", type=int, default=None, help="Server port")
@click.option("--ssl/--no-ssl", "use_ssl", default=None, help="Use HTTPS")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP requests")
@click.pass_context
def cli(ctx, config_path: str | None, host: str | None, port: int | None,
        use_ssl: bool | None, verbose: bool):
    """Pastec image search CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    reset_config()
    cfg = load_config(config_path)

    server = dict(cfg["server"])
    if host is not None:
        server["host"] = host
    if port is not None:
        server["port"] = port
    if use_ssl is not None:
        server["use_ssl"] = use_ssl
    ctx.obj = PastecClient.from_config({"server": server})


@cli.command()
@click.pass_obj
@handle_errors
def ping(client: PastecClient):
    """Check that the server is online."""
    client.ping()
    click.echo(f"Server at {client.host} is online.")


@cli.command()
@click.argument("image_id", type=int)
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--convert", "-c", is_flag=True, help="Convert PNG/HEIC to JPEG before upload")
@click.pass_obj
@handle_errors
def index(client: PastecClient, image_id: int, image_path: str, convert: bool):
    """Add an image file to the index."""
    content = _read_image_arg(image_path, convert)
    _echo_image_id("Indexed image", client.index_image_data(image_id, content))


@cli.command("index-url")
@click.argument("image_id", type=int)
@click.argument("url")
@click.pass_obj
@handle_errors
def index_url(client: PastecClient, image_id: int, url: str):
    """Let the server download and index an image."""
    _echo_image_id("Indexed image", client.index_image_url(image_id, url))


@cli.command()
@click.argument("image_id", type=int)
@click.pass_obj
@handle_errors
def remove(client: PastecClient, image_id: int):
    """Remove an image from the index."""
    _echo_image_id("Removed image", client.remove_image(image_id))


@cli.command()
@click.argument("image_id", type=int)
@click.argument("tag")
@click.pass_obj
@handle_errors
def tag(client: PastecClient, image_id: int, tag: str):
    """Tag an indexed image."""
    client.add_tag(image_id, tag)
    click.echo(f"Tagged image {image_id}: {tag}")


@cli.command()
@click.argument("image_id", type=int)
@click.pass_obj
@handle_errors
def untag(client: PastecClient, image_id: int):
    """Remove the tag of an indexed image."""
    client.remove_tag(image_id)
    click.echo(f"Removed tag of image {image_id}.")


@cli.command()
@click.argument("path", default="")
@click.pass_obj
@handle_errors
def load(client: PastecClient, path: str):
    """Load the index from a server-side path."""
    client.load_index(path)
    click.echo(f"Index loaded from {path or 'server default'}.")


@cli.command()
@click.argument("path", default="")
@click.pass_obj
@handle_errors
def write(client: PastecClient, path: str):
    """Write the index to a server-side path."""
    client.write_index(path)
    click.echo(f"Index written to {path or 'server default'}.")


@cli.command("load-tags")
@click.argument("path", default="")
@click.pass_obj
@handle_errors
def load_tags(client: PastecClient, path: str):
    """Load the tag index from a server-side path."""
    client.load_index_tags(path)
    click.echo(f"Tag index loaded from {path or 'server default'}.")


@cli.command("write-tags")
@click.argument("path", default="")
@click.pass_obj
@handle_errors
def write_tags(client: PastecClient, path: str):
    """Write the tag index to a server-side path."""
    client.write_index_tags(path)
    click.echo(f"Tag index written to {path or 'server default'}.")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
@handle_errors
def clear(client: PastecClient, yes: bool):
    """Clear the loaded index and its tags."""
    if not yes:
        click.confirm("Clear the server index?", abort=True)

    client.clear_index()
    click.echo("Index cleared.")


@cli.command()
@click.pass_obj
@handle_errors
def ids(client: PastecClient):
    """List the ids of all indexed images."""
    image_ids = client.get_image_ids()
    for image_id in image_ids:
        click.echo(image_id)
    click.echo(f"{len(image_ids)} images indexed.", err=True)


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", "-n", type=click.IntRange(min=1), default=10, help="Max results")
@click.option("--convert", "-c", is_flag=True, help="Convert PNG/HEIC to JPEG before upload")
@click.pass_obj
@handle_errors
def search(client: PastecClient, image_path: str, limit: int, convert: bool):
    """Search the index for images similar to IMAGE_PATH."""
    content = _read_image_arg(image_path, convert)
    matches = client.query_image_data(content)

    if not matches:
        click.echo("No matches found.")
        return

    click.echo(f"Found {len(matches)} matches:\n")
    for i, m in enumerate(matches[:limit], 1):
        rect = m.bounding_rect
        click.echo(f"{i}. Image {m.image_id}" + (f" [{m.tag}]" if m.tag else ""))
        click.echo(f"   Score: {m.score:g}")
        click.echo(f"   Region: x={rect.x} y={rect.y} w={rect.width} h={rect.height}")
        click.echo()


@cli.command()
def config():
    """Show current configuration."""
    import yaml
    click.echo(yaml.dump(get_config(), default_flow_style=False))


if __name__ == "__main__":
    cli()
