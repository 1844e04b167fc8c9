import importlib


def test_core_main_callable():
    from GazeOS.core.app import main
    assert callable(main)


def test_import_overlay():
    from GazeOS.ui.overlay import GazeOverlay  # noqa: F401


def test_run_module_entry():
    spec = importlib.util.find_spec("GazeOS.core.app")
    assert spec is not None, "core.app module should be discoverable"
