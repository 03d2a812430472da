#!/usr/bin/env python
"""
Serve the estimator API with uvicorn.

Usage:
    python scripts/run_api.py [--host HOST] [--port PORT] [--no-reload]

Defaults come from CONCRETE_ESTIMATOR_API_HOST / CONCRETE_ESTIMATOR_API_PORT.
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
src_path = project_root / 'src'
sys.path.insert(0, str(src_path))

from concrete_estimator.config.settings import EnvSettings


def build_command(host: str, port: int, reload: bool) -> list[str]:
    cmd = [sys.executable, '-m', 'uvicorn', 'concrete_estimator.api.main:app',
           '--host', host, '--port', str(port)]
    if reload:
        cmd += ['--reload', '--reload-dir', str(src_path)]
    return cmd


def main():
    env_settings = EnvSettings()
    parser = argparse.ArgumentParser(description="Run the concrete estimator API")
    parser.add_argument('--host', default=env_settings.API_HOST)
    parser.add_argument('--port', type=int, default=env_settings.API_PORT)
    parser.add_argument('--no-reload', dest='reload', action='store_false')
    args = parser.parse_args()

    # uvicorn imports the app in a child process, which needs src on its path
    env = os.environ.copy()
    env['PYTHONPATH'] = os.pathsep.join(filter(None, [str(src_path), env.get('PYTHONPATH')]))

    cmd = build_command(args.host, args.port, args.reload)
    print(f"Estimator API on http://{args.host}:{args.port} (docs at /docs)")
    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
