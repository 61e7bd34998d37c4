"""
Desktop launcher.

Starts the API server as a child process against a SQLite file in the
user's data directory, opens a browser window once the server has had
time to bind, and stops the server when the launcher exits.
"""
import logging
import os
import subprocess
import sys
import time
import webbrowser
from pathlib import Path

import click

from config import Config

logger = logging.getLogger(__name__)

APP_TARGET = 'saga_inventory:create_app("config.DesktopConfig")'


def build_server_env(data_dir: Path, port: int) -> dict:
    """Environment for the server process: desktop mode, file-backed store."""
    env = dict(os.environ)
    env.update({
        'FLASK_ENV': 'production',
        'DESKTOP_MODE': 'true',
        'DATABASE_URL': f"sqlite:///{data_dir / Config.DESKTOP_DB_FILENAME}",
        'PORT': str(port),
        'CACHE_ENABLED': 'false',
    })
    return env


def build_server_command(port: int) -> list:
    return [
        sys.executable, '-m', 'flask', '--app', APP_TARGET,
        'run', '--host', '127.0.0.1', '--port', str(port), '--no-reload',
    ]


def start_server(data_dir: Path, port: int) -> subprocess.Popen:
    data_dir.mkdir(parents=True, exist_ok=True)
    process = subprocess.Popen(build_server_command(port), env=build_server_env(data_dir, port))
    logger.info(f"[DESKTOP] Server started (pid={process.pid}, port={port}, data={data_dir})")
    return process


def stop_server(process: subprocess.Popen, timeout: float = 5) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
    logger.info(f"[DESKTOP] Server process exited with code {process.returncode}")


@click.command()
@click.option('--port', default=Config.PORT, show_default=True, help='Local server port')
@click.option('--data-dir', default=Config.DESKTOP_DATA_DIR, show_default=True,
              type=click.Path(file_okay=False, path_type=Path), help='Directory for the SQLite store')
@click.option('--delay', default=Config.DESKTOP_WINDOW_DELAY, show_default=True,
              help='Seconds to wait before opening the window')
@click.option('--no-browser', is_flag=True, help='Start the server without opening a window')
def main(port, data_dir, delay, no_browser):
    """Run Saga Inventory as a local desktop application."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')
    process = start_server(data_dir, port)

    try:
        time.sleep(delay)
        if process.poll() is not None:
            raise click.ClickException(f'Server exited early with code {process.returncode}')

        url = f'http://localhost:{port}'
        if not no_browser:
            webbrowser.open(url, new=1)
        click.echo(f'Saga Inventory running at {url} (Ctrl+C to quit)')
        process.wait()
    except KeyboardInterrupt:
        click.echo('Shutting down...')
    finally:
        stop_server(process)


if __name__ == '__main__':
    main()
