import importlib.util
from pathlib import Path

SCRIPTS = Path(__file__).parent.parent / 'scripts'


def load_script(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f'{name}.py')
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_api_command_uses_host_and_port():
    run_api = load_script('run_api')
    cmd = run_api.build_command('127.0.0.1', 9100, reload=False)

    assert cmd[1:4] == ['-m', 'uvicorn', 'concrete_estimator.api.main:app']
    assert cmd[cmd.index('--host') + 1] == '127.0.0.1'
    assert cmd[cmd.index('--port') + 1] == '9100'
    assert '--reload' not in cmd


def test_api_command_reload_watches_src():
    cmd = load_script('run_api').build_command('0.0.0.0', 8000, reload=True)
    assert '--reload' in cmd
    assert cmd[cmd.index('--reload-dir') + 1].endswith('src')
