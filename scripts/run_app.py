#!/usr/bin/env python
"""
Launch the Streamlit preview of the estimator.

Usage:
    python scripts/run_app.py [--port PORT] [--headless]

The port defaults to CONCRETE_ESTIMATOR_UI_PORT.
"""
import argparse
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

from concrete_estimator.config.settings import EnvSettings

UI_MODULE = project_root / 'src' / 'concrete_estimator' / 'ui' / 'app_streamlit.py'


def main():
    parser = argparse.ArgumentParser(description="Run the estimator preview UI")
    parser.add_argument('--port', type=int, default=EnvSettings().UI_PORT)
    parser.add_argument('--headless', action='store_true', help="Don't open a browser")
    args = parser.parse_args()

    if not UI_MODULE.exists():
        sys.exit(f"ERROR: preview UI not found at {UI_MODULE}")

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(UI_MODULE),
           '--server.port', str(args.port)]
    if args.headless:
        cmd += ['--server.headless', 'true']

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nPreview stopped.")


if __name__ == "__main__":
    main()
