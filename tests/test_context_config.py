import pytest
from io import StringIO
from pydantic import ValidationError
from rich.console import Console

from applife.core.context import LifecycleContext
from applife.core.models import ComponentState
from applife.utils.console import ConsoleLogSink
from applife.utils.diagnostics import DuplicateDeclarationError


def test_context_init_with_config():
    config_data = {
        "applife": {
            "app_name": "Inventory",
            "log_level": "WARNING",
            "duplicate_policy": "ignore",
            "default_load_order": 10,
        },
        "modules": ["services.db"],
        "bundles": ["services.api:ApiModule"],
    }

    ctx = LifecycleContext(config_dict=config_data)

    assert ctx.settings.app_name == "Inventory"
    assert ctx.settings.log_level == "WARNING"
    assert ctx.modules == ["services.db"]
    assert ctx.bundle_paths == ["services.api:ApiModule"]
    assert ctx.declarations.duplicate_policy == "ignore"
    assert isinstance(ctx.sink, ConsoleLogSink)
    assert ctx.sink.log_level == "WARNING"

    class Service:
        pass

    ctx.declare(Service)
    ctx.declare(Service, 1)
    assert ctx.declarations.load_order_of(Service) == 10


def test_context_default_init():
    ctx = LifecycleContext()

    assert ctx.settings.app_name == "AppLife App"
    assert ctx.settings.duplicate_policy == "error"
    assert ctx.settings.default_load_order == 0
    assert ctx.started is False
    assert len(ctx.declarations) == 0
    assert len(ctx.instances) == 0


def test_context_default_policy_rejects_duplicates(context):
    class Service:
        pass

    context.declare(Service)
    with pytest.raises(DuplicateDeclarationError):
        context.declare(Service)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("APPLIFE_APP_NAME", "From Env")
    monkeypatch.setenv("APPLIFE_DUPLICATE_POLICY", "ignore")

    ctx = LifecycleContext()

    assert ctx.settings.app_name == "From Env"
    assert ctx.declarations.duplicate_policy == "ignore"


def test_invalid_duplicate_policy_is_rejected():
    with pytest.raises(ValidationError):
        LifecycleContext(config_dict={"applife": {"duplicate_policy": "replace"}})


def test_context_rejects_sink_without_severities():
    with pytest.raises(TypeError, match="sink"):
        LifecycleContext(sink=object())


def test_contexts_are_isolated(sink):
    first = LifecycleContext(sink=sink)
    second = LifecycleContext(sink=sink)

    class Service:
        pass

    first.declare(Service)

    assert Service in first.declarations
    assert Service not in second.declarations
    assert first.state_of(Service) == ComponentState.UNCONSTRUCTED


def test_console_sink_filters_by_level():
    buffer = StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    sink = ConsoleLogSink(log_level="WARNING", console=console)

    sink.info("hidden notice")
    sink.warning("start hook [Cache] failed")
    sink.error("constructor failed")

    output = buffer.getvalue()
    assert "hidden notice" not in output
    assert "[AppLife] start hook [Cache] failed" in output
    assert "[AppLife] constructor failed" in output
