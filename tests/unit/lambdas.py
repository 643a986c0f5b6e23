import importlib.util
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def load_lambda_module(name, folder, filename):
    """Import a handler file from lambda/<folder> under a unique module name."""
    path = os.path.join(PROJECT_ROOT, "lambda", folder, filename)
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
