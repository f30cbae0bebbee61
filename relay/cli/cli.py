import asyncio
import logging
import click
from relay import __version__
from relay.config import RelayConfig, STORE_TYPES
from relay.rpc import RelayService, MethodDispatcher
from relay.web import WebServer
from .cli_store import cli as cli_store

# Main CLI to run and maintain the relay.
# It utilizes the 'click' library.

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"

@click.group()
@click.version_option(__version__, prog_name="relay")
@click.pass_context
@click.option("--app-dir", "-d", help="Where records and blobs are stored. Defaults to $APP_DIR or ~/.rgb-proxy-server.")
@click.option("--store-type", type=click.Choice(STORE_TYPES, case_sensitive=False), help="What type of store to use. 'memory' keeps nothing across restarts.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), help="Defaults to $LOG_LEVEL or INFO.")
def cli(ctx:click.Context, app_dir:str|None, store_type:str|None, log_level:str|None):
    try:
        config = RelayConfig.from_env()
    except ValueError as e:
        raise click.ClickException(str(e)) from None
    config = config.override(
        app_dir=app_dir, 
        store_type=store_type.lower() if store_type else None, 
        log_level=log_level.upper() if log_level else None)
    #print logs to console
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
    ctx.obj = config

cli.add_command(cli_store, name="store")

#===========================================================
# 'serve' command
#===========================================================
@cli.command()
@click.pass_context
@click.option("--port", "-p", type=int, help="Port to listen on. Defaults to $PORT or 3000.")
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind to.")
def serve(ctx:click.Context, port:int|None, host:str):
    """Starts the relay's JSON-RPC server."""
    config:RelayConfig = ctx.obj.override(port=port)
    print("-> Starting Relay Server")
    print(f" app dir: {config.app_dir} ({config.store_type})")
    blob_store, record_index = config.init_stores()
    dispatcher = MethodDispatcher(RelayService(blob_store, record_index))
    web_server = WebServer(dispatcher, blob_store)
    print(f"  App is running at http://localhost:{config.port}")
    print("  Press CTRL-C to stop\n")
    asyncio.run(web_server.run(host=host, port=config.port, log_level=config.log_level))

if __name__ == '__main__':
    cli(None)
