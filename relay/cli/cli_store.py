import click
from relay.blobs.stores.file import FileBlobStore
from relay.config import RelayConfig
from relay.records import Namespace

# Maintenance commands for the persistent stores of the relay.

def _load_file_stores(config:RelayConfig):
    if(config.store_type != "lmdb"):
        raise click.ClickException(f"The '{config.store_type}' store keeps nothing on disk, there is nothing to inspect.")
    blob_store, record_index = config.init_stores()
    if(not isinstance(blob_store, FileBlobStore)):
        raise click.ClickException("Expected a file blob store.")
    return blob_store, record_index

@click.group()
def cli():
    pass

#===========================================================
# 'info' command
#===========================================================
@cli.command()
@click.pass_context
def info(ctx:click.Context):
    """Prints the number of records, blobs, and leftover staging files."""
    config:RelayConfig = ctx.obj
    blob_store, record_index = _load_file_stores(config)
    print(f"app dir: {config.app_dir}")
    for namespace in Namespace:
        print(f"{namespace.value:<14} {record_index.count_sync(namespace)}")
    print(f"{'blobs':<14} {blob_store.count_sync()}")
    print(f"{'staging':<14} {len(blob_store.staged_files())}")

#===========================================================
# 'sweep' command
#===========================================================
@cli.command()
@click.pass_context
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def sweep(ctx:click.Context, yes:bool):
    """Deletes staging files left behind by interrupted uploads. Do not run while the server is running."""
    config:RelayConfig = ctx.obj
    blob_store, _ = _load_file_stores(config)
    staged = blob_store.staged_files()
    if(len(staged) == 0):
        print("No leftover staging files.")
        return
    if(not yes):
        click.confirm(f"Delete {len(staged)} staging file(s) in '{blob_store.staging_path}'?", abort=True)
    removed = blob_store.sweep_staging()
    print(f"Removed {removed} staging file(s).")
