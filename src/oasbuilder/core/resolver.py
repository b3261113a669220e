"""Resolution of ``$ref`` pointers and external files.

Two operations are offered over a document and the URI it is anchored at:

- :func:`dereference` replaces every ``$ref`` (internal or external) with the
  content it points to, leaving no ``$ref`` behind.
- :func:`bundle` inlines external ``$ref`` targets only; internal pointers
  such as ``#/components/schemas/User`` are preserved.

Both fail hard on the first unresolvable reference.

Before a document is assembled, every external file used by the routes is
copied into a scratch directory as a self-contained (fully dereferenced) JSON
file by :func:`resolve_external_files`. Rendered schemas then point at those
copies through the :class:`BuildContext`.
"""

import copy
import json
import shutil
import tempfile
import uuid
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from urllib.parse import urldefrag, urlparse
from urllib.request import url2pathname

import jsonref
import yaml
from rich.console import Console

from oasbuilder.context import BuildContext
from oasbuilder.core.components import iter_route_schemas, walk_nodes
from oasbuilder.core.loader import load_document
from oasbuilder.core.writer import write_json
from oasbuilder.exceptions import ResolutionError
from oasbuilder.routes import ReferencedRoute
from oasbuilder.schema.composite import ExternalReferenceNode
from oasbuilder.transformers.walk import iter_refs, replace_nodes

MAX_RESOLVE_WORKERS = 8

_URL_SCHEMES = ("http", "https", "file")


@contextmanager
def scratch_directory() -> Iterator[Path]:
    """Create a temporary working directory, removed on exit even on failure.

    Removal errors are ignored: a stray directory does not affect the output.
    """
    path = Path(tempfile.mkdtemp(prefix="oasbuilder-"))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


def to_uri(file: str) -> str:
    """Return a URI for *file*: URLs pass through, paths become ``file://`` URIs."""
    if urlparse(file).scheme in _URL_SCHEMES:
        return file
    return Path(file).resolve().as_uri()


def load_uri(uri: str) -> Any:
    """Document loader handed to jsonref.

    Local files go through :func:`load_document` so YAML is supported; remote
    URLs use jsonref's own loader.
    """
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return load_document(Path(url2pathname(parsed.path)))
    return jsonref.jsonloader(uri)


def _plain(data: Any, source: str) -> Any:
    # jsonref shares referent objects between every place that points at
    # them; a JSON round trip gives each location its own copy.
    try:
        return json.loads(json.dumps(data))
    except ValueError as e:
        raise ResolutionError(source, f"circular $ref cannot be inlined ({e})") from e


def dereference(document: Any, base_uri: str) -> Any:
    """
    Replace every ``$ref`` in *document* with its target.

    Args:
        document: The document to dereference (not modified)
        base_uri: URI that relative references are resolved against

    Returns:
        A new document without any ``$ref``

    Raises:
        ResolutionError: If a reference cannot be loaded or points nowhere
    """
    try:
        resolved = jsonref.replace_refs(
            document,
            base_uri=base_uri,
            loader=load_uri,
            merge_props=True,
            proxies=False,
            lazy_load=False,
        )
    except jsonref.JsonRefError as e:
        raise ResolutionError(base_uri, str(e)) from e
    return _plain(resolved, base_uri)


def _is_external(ref: str) -> bool:
    return bool(urldefrag(ref)[0])


def bundle(document: Any, base_uri: str) -> Any:
    """
    Inline external ``$ref`` targets while keeping internal pointers.

    Args:
        document: The document to bundle (not modified)
        base_uri: URI that relative references are resolved against

    Returns:
        A new document whose remaining ``$ref`` values all start with ``#``

    Raises:
        ResolutionError: If an external reference cannot be resolved
    """
    document = copy.deepcopy(document)
    if not any(_is_external(ref) for ref in iter_refs(document)):
        return document

    def _inline_external(node: Any) -> Any | None:
        if isinstance(node, dict) and _is_external(node.get("$ref", "")):
            return dereference(node, base_uri)
        return None

    return replace_nodes(document, _inline_external)


def collect_external_files(routes: Iterable[Any]) -> list[str]:
    """Distinct external files used by *routes*, in first-use order.

    Sources are referenced routes and every external reference node reachable
    from a defined route's schemas, response headers included.
    """
    files: dict[str, None] = {}
    for route in routes:
        if isinstance(route, ReferencedRoute):
            files.setdefault(route.ref.file, None)
            continue
        for schema in iter_route_schemas(route, include_headers=True):
            for node in walk_nodes(schema):
                if isinstance(node, ExternalReferenceNode):
                    files.setdefault(node.file, None)
    return list(files)


def resolve_external_file(file: str, scratch_dir: Path) -> str:
    """
    Write a self-contained copy of *file* into *scratch_dir*.

    The copy is named after the source with a random suffix, so two sources
    sharing a base name never collide.

    Returns:
        The path of the copy

    Raises:
        ResolutionError: If the file cannot be read, parsed or dereferenced
    """
    uri = to_uri(file)
    try:
        document = load_uri(uri)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ResolutionError(file, str(e)) from e

    resolved = dereference(document, uri)

    stem = Path(urlparse(uri).path).stem or "external"
    target = scratch_dir / f"{stem}-{uuid.uuid4().hex[:8]}.json"
    write_json(resolved, target)
    return str(target)


def resolve_external_files(
    routes: Iterable[Any],
    scratch_dir: Path,
    ctx: BuildContext,
    console: Console | None = None,
) -> None:
    """
    Resolve every external file used by *routes* and record it in *ctx*.

    Distinct files are resolved concurrently; all of them are finished before
    this returns.

    Raises:
        ResolutionError: If any file fails; nothing is recorded in that case
    """
    files = [file for file in collect_external_files(routes) if file not in ctx.resolved_files]
    if not files:
        return

    with ThreadPoolExecutor(max_workers=min(MAX_RESOLVE_WORKERS, len(files))) as executor:
        futures = {
            file: executor.submit(resolve_external_file, file, scratch_dir) for file in files
        }
        results = {file: future.result() for file, future in futures.items()}

    for file, resolved_path in results.items():
        if console:
            console.print(f"  [dim]→ {file} → {Path(resolved_path).name}[/dim]")
        ctx.record(file, resolved_path)
