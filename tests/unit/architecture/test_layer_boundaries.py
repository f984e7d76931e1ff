import ast
import pathlib
from typing import Iterable, Tuple, List

ROOT = pathlib.Path(__file__).resolve().parents[3]  # project root


def _python_files_under(rel_path: str) -> Iterable[pathlib.Path]:
    base = ROOT / rel_path
    if not base.exists():
        return []
    return base.rglob("*.py")


def _collect_imports(py_file: pathlib.Path) -> List[Tuple[str, str]]:
    """
    Return list of (node_type, module) for each import in file.
    node_type: 'import' or 'from'
    module: fully specified module for 'from', or the first alias for 'import'
    """
    try:
        source = py_file.read_text(encoding="utf-8")
    except Exception:
        return []
    try:
        tree = ast.parse(source, filename=str(py_file))
    except SyntaxError:
        return []
    imports: List[Tuple[str, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(("import", alias.name))
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            imports.append(("from", mod))
    return imports


def _violations(files: Iterable[pathlib.Path], forbidden_prefixes: Iterable[str], allowed_prefixes: Iterable[str] = ()) -> List[Tuple[pathlib.Path, str]]:
    violations: List[Tuple[pathlib.Path, str]] = []
    allowed_prefixes = tuple(allowed_prefixes)
    forbidden_prefixes = tuple(forbidden_prefixes)
    for f in files:
        for _kind, mod in _collect_imports(f):
            if not mod:
                continue
            # allowlist takes precedence
            if allowed_prefixes and any(mod.startswith(p) for p in allowed_prefixes):
                continue
            if any(mod.startswith(p) for p in forbidden_prefixes):
                violations.append((f, mod))
    return violations


def test_domain_does_not_depend_on_application_or_infrastructure():
    files = list(_python_files_under("src/domain"))
    # Domain should not import the application layer, observability, or infrastructure
    forbidden = ("src.application", "observability", "config", "database", "src.infrastructure", "pymongo", "bson")
    violations = _violations(files, forbidden_prefixes=forbidden)
    assert not violations, f"Domain layer import violations:\n" + "\n".join(f"- {p}: {mod}" for p, mod in violations)


def test_application_does_not_depend_on_infrastructure():
    files = list(_python_files_under("src/application"))
    # Application can import domain and its own modules, but not the store or its driver
    forbidden = ("database", "src.infrastructure", "pymongo", "bson")
    violations = _violations(files, forbidden_prefixes=forbidden)
    assert not violations, f"Application layer import violations:\n" + "\n".join(f"- {p}: {mod}" for p, mod in violations)


def test_only_composition_imports_the_database_package():
    files = [
        f for f in _python_files_under("src/infrastructure")
        if "composition" not in f.parts
    ]
    forbidden = ("database",)
    violations = _violations(files, forbidden_prefixes=forbidden)
    assert not violations, "Only the composition root may import `database`:\n" + "\n".join(f"- {p}: {mod}" for p, mod in violations)


def test_domain_has_no_io_imports():
    files = list(_python_files_under("src/domain"))
    forbidden = ("socket", "requests", "asyncio", "threading")
    violations = _violations(files, forbidden_prefixes=forbidden)
    assert not violations, f"Domain layer must stay pure:\n" + "\n".join(f"- {p}: {mod}" for p, mod in violations)
