import importlib
import sys
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer

from applife import start
from applife.cli.formatter import OutputFormatter
from applife.config.loader import load_config
from applife.core.context import LifecycleContext, reset_default_context
from applife.runtime.contracts import LifecycleStatus
from applife.runtime.resolver import Resolver
from applife.utils.diagnostics import AppLifeError, diagnostic_from_error

app = typer.Typer(name="applife", help="AppLife CLI Interface", rich_markup_mode=None)

RootOption = typer.Option(Path("."), "--root", "-r", help="Project root holding applife.yaml; added to sys.path.")
ModuleOption = typer.Option(None, "--module", "-m", help="Module to import before running (repeatable).")


def _import_modules(names: List[str]) -> None:
    """Import each listed module exactly once for this invocation.

    Listed modules (and their submodules) are dropped from sys.modules first so
    their decorators declare into the freshly reset context. A module already
    imported transitively by an earlier one in this pass is not imported again.
    """
    requested = list(dict.fromkeys(names))
    for name in requested:
        for loaded in [m for m in sys.modules if m == name or m.startswith(f"{name}.")]:
            del sys.modules[loaded]

    importlib.invalidate_caches()
    for name in requested:
        importlib.import_module(name)


def _resolve_attribute(path: str) -> Any:
    """Resolve 'pkg.mod:Attr' or 'pkg.mod.Attr' to an object."""
    if ":" in path:
        module_name, attr_path = path.split(":", 1)
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise typer.BadParameter(f"Invalid bundle path '{path}'. Use 'package.module:Bundle'.")

    target = sys.modules.get(module_name) or importlib.import_module(module_name)
    for part in attr_path.split("."):
        target = getattr(target, part)
    return target


def _prepare_context(root: Path, modules: Optional[List[str]]) -> LifecycleContext:
    root_dir = root.expanduser().resolve()
    config_data = load_config(root_dir / "applife.yaml")
    context = reset_default_context(LifecycleContext(config_dict=config_data))

    if str(root_dir) not in sys.path:
        sys.path.insert(0, str(root_dir))

    _import_modules([*context.modules, *(modules or [])])

    bundles = [_resolve_attribute(path) for path in context.bundle_paths]
    context.load_modules(bundles)
    return context


def _fail(error: Exception) -> NoReturn:
    OutputFormatter.log(str(error), severity="error")
    if isinstance(error, AppLifeError):
        OutputFormatter.print_diagnostics([diagnostic_from_error(error)])
    raise typer.Exit(code=1)


@app.command()
def run(
    root: Path = RootOption,
    module: Optional[List[str]] = ModuleOption,
) -> None:
    """
    Construct, initialize and start every declared controller.
    """
    try:
        context = _prepare_context(root, module)
        report = start(context)
    except (AppLifeError, ImportError, AttributeError) as e:
        _fail(e)

    OutputFormatter.print_report(report)
    if report.status == LifecycleStatus.DEGRADED:
        OutputFormatter.log(f"{len(report.failed_starts)} start hook(s) failed.", severity="warning")
    else:
        OutputFormatter.log("Lifecycle started.", severity="success")


@app.command()
def graph(
    root: Path = RootOption,
    module: Optional[List[str]] = ModuleOption,
) -> None:
    """
    Print the construction order without constructing anything.
    """
    try:
        context = _prepare_context(root, module)
        order = Resolver(context.declarations).construction_order()
    except (AppLifeError, ImportError, AttributeError) as e:
        _fail(e)

    OutputFormatter.print_order(order, context.declarations)


@app.command()
def check(
    root: Path = RootOption,
    module: Optional[List[str]] = ModuleOption,
) -> None:
    """
    Verify bundles and the dependency graph (cycles, undeclared controllers).
    """
    try:
        context = _prepare_context(root, module)
        order = Resolver(context.declarations).construction_order()
    except (AppLifeError, ImportError, AttributeError) as e:
        _fail(e)

    typer.echo(f"OK: {len(order)} controller(s), {len(context.bundles)} bundle(s).")


if __name__ == "__main__":
    app()
