import pytest
from applife.core.registry import BundleRegistry, DeclarationRegistry, infer_dependencies
from applife.utils.diagnostics import (
    DeclarationError,
    DuplicateDeclarationError,
    LifecycleAlreadyStartedError,
    UnknownIdentityError,
)


class Database:
    pass


class Cache:
    def __init__(self, db: Database):
        self.db = db


class Service:
    def __init__(self, db: Database, cache: Cache, retries: int = 3):
        self.db = db
        self.cache = cache
        self.retries = retries


def test_registry_declaration():
    reg = DeclarationRegistry()
    declaration = reg.declare(Database, 2, [])

    assert reg.get(Database) is declaration
    assert Database in reg
    assert reg.is_declared(Database)
    assert reg.load_order_of(Database) == 2
    assert reg.dependencies_of(Database) == ()


def test_registry_default_load_order():
    reg = DeclarationRegistry(default_load_order=5)
    reg.declare(Database)

    assert reg.load_order_of(Database) == 5


def test_registry_get_missing():
    reg = DeclarationRegistry()
    with pytest.raises(UnknownIdentityError, match="Database"):
        reg.get(Database)
    with pytest.raises(UnknownIdentityError):
        reg.dependencies_of(Database)
    assert not reg.is_declared(Database)


def test_registry_duplicate_error():
    reg = DeclarationRegistry()
    reg.declare(Database)

    with pytest.raises(DuplicateDeclarationError, match="already registered"):
        reg.declare(Database, 1)


def test_registry_duplicate_ignore_keeps_first():
    reg = DeclarationRegistry(duplicate_policy="ignore")
    first = reg.declare(Database, 1)
    second = reg.declare(Database, 9, [Cache])

    assert second is first
    assert reg.load_order_of(Database) == 1
    assert reg.dependencies_of(Database) == ()
    assert len(reg) == 1


def test_registry_keeps_declaration_order():
    reg = DeclarationRegistry()
    reg.declare(Service, depends_on=[])
    reg.declare(Database)
    reg.declare(Cache, depends_on=[Database])

    assert [d.identity for d in reg] == [Service, Database, Cache]
    assert [d.sequence for d in reg] == [0, 1, 2]


def test_registry_explicit_dependencies_keep_order():
    reg = DeclarationRegistry()
    reg.declare(Service, depends_on=[Cache, Database])

    assert reg.dependencies_of(Service) == (Cache, Database)


def test_registry_infers_dependencies_from_constructor():
    reg = DeclarationRegistry()
    reg.declare(Service)

    assert reg.dependencies_of(Service) == (Database, Cache)


def test_registry_sealed_rejects_declarations():
    reg = DeclarationRegistry()
    reg.seal()

    with pytest.raises(LifecycleAlreadyStartedError):
        reg.declare(Database)


def test_infer_dependencies_without_init():
    assert infer_dependencies(Database) == ()


def test_infer_dependencies_from_plain_factory():
    def build_cache(db: Database) -> Cache:
        return Cache(db)

    assert infer_dependencies(build_cache) == (Database,)


def test_infer_dependencies_rejects_unannotated_parameter():
    class Loose:
        def __init__(self, thing):
            self.thing = thing

    with pytest.raises(DeclarationError, match="no type annotation"):
        infer_dependencies(Loose)


def test_infer_dependencies_rejects_required_keyword_only():
    class KeywordOnly:
        def __init__(self, *, db: Database):
            self.db = db

    with pytest.raises(DeclarationError, match="keyword-only"):
        infer_dependencies(KeywordOnly)


def test_bundle_registry_duplicate_error():
    bundles = BundleRegistry()
    bundles.register("billing", [Database])

    with pytest.raises(DuplicateDeclarationError, match="Module 'billing' already registered"):
        bundles.register("billing", [Cache])


def test_bundle_registry_verify_names_first_missing_member():
    reg = DeclarationRegistry()
    reg.declare(Database)
    bundles = BundleRegistry()
    bundles.register("billing", [Database, Cache, Service])

    with pytest.raises(UnknownIdentityError) as exc_info:
        bundles.verify("billing", reg)

    assert exc_info.value.identity is Cache
    assert exc_info.value.required_by == "billing"


def test_bundle_registry_verify_unregistered_bundle():
    with pytest.raises(UnknownIdentityError, match="Module 'missing' is not declared"):
        BundleRegistry().verify("missing", DeclarationRegistry())


def test_bundle_registry_verify_explicit_members():
    reg = DeclarationRegistry()
    reg.declare(Database)

    bundle = BundleRegistry().verify("adhoc", reg, members=[Database])

    assert bundle.members == (Database,)


def test_infer_dependencies_unresolvable_string_annotation_points_to_depends_on():
    class Report:
        def __init__(self, source: "LocalOnlySource"):
            self.source = source

    with pytest.raises(DeclarationError, match="pass depends_on explicitly"):
        infer_dependencies(Report)


def test_explicit_depends_on_skips_annotation_lookup():
    class Report:
        def __init__(self, source: "LocalOnlySource"):
            self.source = source

    reg = DeclarationRegistry()
    reg.declare(Report, depends_on=[Database])

    assert reg.dependencies_of(Report) == (Database,)
